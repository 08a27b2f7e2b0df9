"""
Main entry point for epicstyle.

This allows the package to be run as a module:
python -m epicstyle
"""

from .cli.commands import main

if __name__ == '__main__':
    main()
