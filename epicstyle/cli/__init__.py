"""Command-line interface for epicstyle."""
