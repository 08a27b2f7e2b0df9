"""
Core modules for C style analysis, scoring, and automatic fixing.
"""

from .source import SourceFile, FunctionSpan, extract_functions
from .rules import Rule, Violation, Severity, RULE_CATALOG, build_registry
from .analyzer import StyleAnalyzer, calculate_score
from .aggregator import FileResult, Report
from .fixer import AutoFixer, Fix, FixResult, FixOutcome, FixerError
from .collector import collect_files, EpicstyleError, InputPathError

__all__ = [
    'SourceFile',
    'FunctionSpan',
    'extract_functions',
    'Rule',
    'Violation',
    'Severity',
    'RULE_CATALOG',
    'build_registry',
    'StyleAnalyzer',
    'calculate_score',
    'FileResult',
    'Report',
    'AutoFixer',
    'Fix',
    'FixResult',
    'FixOutcome',
    'FixerError',
    'collect_files',
    'EpicstyleError',
    'InputPathError'
]
