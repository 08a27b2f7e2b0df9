"""
epicstyle

A style checker and auto-fixer for C source files following the Epitech
coding style.
"""

__version__ = "1.0.0"

from .core.analyzer import StyleAnalyzer
from .core.fixer import AutoFixer, FixerError
from .core.aggregator import Report
from .core.collector import EpicstyleError, InputPathError

__all__ = [
    'StyleAnalyzer',
    'AutoFixer',
    'Report',
    'EpicstyleError',
    'InputPathError',
    'FixerError'
]
