"""
Rules Module

This module defines the style rules, their severities and verification levels,
and the check functions that detect violations in a SourceFile.

Every check is a pure function of the SourceFile: rules never depend on each
other and their evaluation order does not change the resulting violations.
"""

import os
from typing import Callable, Dict, List
from dataclasses import dataclass
from enum import Enum
import logging

from ..config import (
    DECLARATION_TYPES,
    MAX_FUNCTION_LINES,
    MAX_FUNCTIONS,
    MAX_LINE_LENGTH,
    MAX_PARAMETERS,
)
from .source import SourceFile, is_blank, is_screaming_snake_case, is_snake_case

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Violation severity levels."""
    MAJOR = "major"
    MINOR = "minor"


@dataclass(frozen=True)
class Violation:
    """A single style violation. Line 0 means the whole file."""
    rule: str
    message: str
    line: int
    severity: Severity
    description: str

    def to_dict(self) -> Dict:
        return {
            'rule': self.rule,
            'message': self.message,
            'line': self.line,
            'severity': self.severity.value,
            'description': self.description
        }


CheckFunction = Callable[[SourceFile], List[Violation]]


@dataclass(frozen=True)
class Rule:
    """A registered style rule."""
    code: str
    name: str
    description: str
    severity: Severity
    level: int
    check: CheckFunction


def check_line_length(source: SourceFile) -> List[Violation]:
    """C-L1: no line longer than 80 characters."""
    violations = []
    for i, line in enumerate(source.lines):
        if len(line) > MAX_LINE_LENGTH:
            violations.append(Violation(
                rule='C-L1',
                message='Line too long',
                line=i + 1,
                severity=Severity.MAJOR,
                description=f'Line contains {len(line)} characters (max {MAX_LINE_LENGTH})'
            ))
    return violations


def check_empty_lines(source: SourceFile) -> List[Violation]:
    """
    C-L2: forbidden empty lines.

    The leading blank line, the trailing blank line and every blank line that
    follows another blank line are reported independently.
    """
    violations = []
    lines = source.lines

    if lines and is_blank(lines[0]):
        violations.append(Violation(
            rule='C-L2',
            message='Empty line at beginning of file',
            line=1,
            severity=Severity.MINOR,
            description='File should not start with empty line'
        ))

    if len(lines) > 1 and is_blank(lines[-1]):
        violations.append(Violation(
            rule='C-L2',
            message='Empty line at end of file',
            line=len(lines),
            severity=Severity.MINOR,
            description='File should not end with empty line'
        ))

    for i in range(1, len(lines)):
        if is_blank(lines[i]) and is_blank(lines[i - 1]):
            violations.append(Violation(
                rule='C-L2',
                message='Consecutive empty lines',
                line=i + 1,
                severity=Severity.MINOR,
                description='Multiple consecutive empty lines are forbidden'
            ))

    return violations


def check_indentation(source: SourceFile) -> List[Violation]:
    """C-L3: lines must not start with a space."""
    violations = []
    for i, line in enumerate(source.lines):
        if line.startswith(' '):
            violations.append(Violation(
                rule='C-L3',
                message='Space indentation',
                line=i + 1,
                severity=Severity.MAJOR,
                description='Use TAB for indentation, not spaces'
            ))
    return violations


def check_variable_declaration(source: SourceFile) -> List[Violation]:
    """C-L4: one variable per declaration line."""
    violations = []
    for i, line in enumerate(source.lines):
        trimmed = line.strip()
        declares = any(f'{type_name} ' in trimmed for type_name in DECLARATION_TYPES)
        if declares and ',' in trimmed and 'for' not in trimmed:
            violations.append(Violation(
                rule='C-L4',
                message='Multiple variable declaration',
                line=i + 1,
                severity=Severity.MAJOR,
                description='Declare only one variable per line'
            ))
    return violations


def check_variable_position(source: SourceFile) -> List[Violation]:
    """C-V1: registered for the catalog, detects nothing."""
    return []


def check_filename(source: SourceFile) -> List[Violation]:
    """C-O1: the file name (without extension) must be snake_case."""
    name = os.path.splitext(source.filename)[0]
    if is_snake_case(name):
        return []
    return [Violation(
        rule='C-O1',
        message='Invalid filename format',
        line=0,
        severity=Severity.MAJOR,
        description='Filename must be in snake_case'
    )]


def count_function_lines(source: SourceFile) -> int:
    """Coarse count of lines that open a function body, main excluded."""
    count = 0
    for line in source.lines:
        trimmed = line.strip()
        if '(' not in trimmed or ')' not in trimmed or '{' not in trimmed:
            continue
        if trimmed.startswith('//') or trimmed.startswith('/*'):
            continue
        if 'if' in trimmed or 'while' in trimmed or 'for' in trimmed:
            continue
        if 'main' not in trimmed:
            count += 1
    return count


def check_function_count(source: SourceFile) -> List[Violation]:
    """C-O2: at most 3 functions per file, main excluded."""
    count = count_function_lines(source)
    if count <= MAX_FUNCTIONS:
        return []
    return [Violation(
        rule='C-O2',
        message='Too many functions',
        line=0,
        severity=Severity.MAJOR,
        description=f'File contains {count} functions (max {MAX_FUNCTIONS} excluding main)'
    )]


def check_function_names(source: SourceFile) -> List[Violation]:
    """C-F1: function names in snake_case."""
    violations = []
    for function in source.functions:
        if function.name != 'main' and not is_snake_case(function.name):
            violations.append(Violation(
                rule='C-F1',
                message='Invalid function name',
                line=function.start_line,
                severity=Severity.MAJOR,
                description=f"Function '{function.name}' must be in snake_case"
            ))
    return violations


def check_macro_names(source: SourceFile) -> List[Violation]:
    """C-F2: macro names in SCREAMING_SNAKE_CASE."""
    violations = []
    for i, line in enumerate(source.lines):
        trimmed = line.strip()
        if not trimmed.startswith('#define '):
            continue
        parts = trimmed.split()
        if len(parts) < 2:
            continue
        macro = parts[1]
        if not is_screaming_snake_case(macro):
            violations.append(Violation(
                rule='C-F2',
                message='Invalid macro name',
                line=i + 1,
                severity=Severity.MAJOR,
                description=f"Macro '{macro}' must be in SCREAMING_SNAKE_CASE"
            ))
    return violations


def check_function_length(source: SourceFile) -> List[Violation]:
    """C-F3: functions of at most 25 lines, braces included."""
    violations = []
    for function in source.functions:
        if function.length > MAX_FUNCTION_LINES:
            violations.append(Violation(
                rule='C-F3',
                message='Function too long',
                line=function.start_line,
                severity=Severity.MAJOR,
                description=f"Function '{function.name}' has {function.length} lines (max {MAX_FUNCTION_LINES})"
            ))
    return violations


def check_comment_format(source: SourceFile) -> List[Violation]:
    """C-C1: only /* */ comments."""
    violations = []
    for i, line in enumerate(source.lines):
        if '//' in line:
            violations.append(Violation(
                rule='C-C1',
                message='Invalid comment format',
                line=i + 1,
                severity=Severity.MINOR,
                description='Use /* */ comments only, not // comments'
            ))
    return violations


def check_function_comment(source: SourceFile) -> List[Violation]:
    """C-C2: registered for the catalog, detects nothing."""
    return []


def check_global_variables(source: SourceFile) -> List[Violation]:
    """C-G1: registered for the catalog, detects nothing."""
    return []


def check_function_parameters(source: SourceFile) -> List[Violation]:
    """C-F4: at most 4 parameters."""
    violations = []
    for function in source.functions:
        if function.param_count > MAX_PARAMETERS:
            violations.append(Violation(
                rule='C-F4',
                message='Too many parameters',
                line=function.start_line,
                severity=Severity.MAJOR,
                description=f"Function '{function.name}' has {function.param_count} parameters (max {MAX_PARAMETERS})"
            ))
    return violations


def check_for_loop_declaration(source: SourceFile) -> List[Violation]:
    """
    C-L5: no declaration in a for loop header.

    Any line holding both "for" and "int " is reported, even when the int
    is not inside the loop header.
    """
    violations = []
    for i, line in enumerate(source.lines):
        trimmed = line.strip()
        if 'for' in trimmed and 'int ' in trimmed:
            violations.append(Violation(
                rule='C-L5',
                message='Variable declaration in for loop',
                line=i + 1,
                severity=Severity.MAJOR,
                description='Do not declare variables in for loop initialization'
            ))
    return violations


RULE_CATALOG: List[Rule] = [
    # Level 1 (basic)
    Rule('C-L1', 'Line Length', 'Line too long (80 chars max)', Severity.MAJOR, 1, check_line_length),
    Rule('C-L2', 'Empty Lines', 'Forbidden empty lines', Severity.MINOR, 1, check_empty_lines),
    Rule('C-L3', 'Indentation', 'TAB indentation only', Severity.MAJOR, 1, check_indentation),
    Rule('C-L4', 'Variable Declaration', 'One variable per line', Severity.MAJOR, 1, check_variable_declaration),
    Rule('C-V1', 'Variable Position', 'Variables at function start', Severity.MAJOR, 1, check_variable_position),
    Rule('C-O1', 'Filename', 'Filename in snake_case', Severity.MAJOR, 1, check_filename),
    Rule('C-O2', 'Function Count', 'Max 3 functions per file', Severity.MAJOR, 1, check_function_count),
    Rule('C-F1', 'Function Name', 'Function name in snake_case', Severity.MAJOR, 1, check_function_names),
    Rule('C-F2', 'Macro Name', 'Macro in SCREAMING_SNAKE_CASE', Severity.MAJOR, 1, check_macro_names),
    Rule('C-F3', 'Function Length', 'Function max 25 lines', Severity.MAJOR, 1, check_function_length),
    # Level 2 (advanced)
    Rule('C-C1', 'Comment Format', '/* */ comments only', Severity.MINOR, 2, check_comment_format),
    Rule('C-C2', 'Function Comment', 'Function comment required', Severity.MINOR, 2, check_function_comment),
    Rule('C-G1', 'Global Variables', 'No non-const globals', Severity.MAJOR, 2, check_global_variables),
    Rule('C-F4', 'Function Parameters', 'Max 4 parameters', Severity.MAJOR, 2, check_function_parameters),
    Rule('C-L5', 'For Loop Declaration', 'No declaration in for loops', Severity.MAJOR, 2, check_for_loop_declaration),
]

# Rules whose check always returns no violation
NOOP_RULES = frozenset({'C-V1', 'C-C2', 'C-G1'})


def build_registry(level: int) -> Dict[str, Rule]:
    """
    Build the rule registry for a verification level.

    Args:
        level: Verification level (1 = basic, 2 = basic + advanced)

    Returns:
        Dictionary mapping rule codes to Rule objects
    """
    registry = {
        rule.code: rule
        for rule in RULE_CATALOG
        if rule.level == 1 or rule.level <= level
    }
    logger.debug(f"Registered {len(registry)} rules for level {level}")
    return registry
