"""
Source Model Module

This module turns the raw text of a C file into the lightweight lexical model
used by the rule checks: an ordered list of lines and a best-effort list of
function spans found by counting braces.
"""

import re
from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum
import logging
import os

from ..config import CONTROL_KEYWORDS

logger = logging.getLogger(__name__)

SNAKE_CASE_RE = re.compile(r'[a-z0-9_]+')
SCREAMING_SNAKE_CASE_RE = re.compile(r'[A-Z0-9_]+')


class ScanState(Enum):
    """States of the function boundary scanner."""
    OUTSIDE_FUNCTION = "outside_function"
    INSIDE_FUNCTION = "inside_function"


@dataclass(frozen=True)
class FunctionSpan:
    """A function found in a source file (1-indexed, inclusive lines)."""
    name: str
    start_line: int
    end_line: int
    param_count: int

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass
class SourceFile:
    """
    Lexical view of a C source file.

    Lines are split on line feeds only, so carriage returns stay attached to
    their line. An empty file still has one (empty) line.
    """
    path: str
    lines: List[str]
    _functions: Optional[List[FunctionSpan]] = field(default=None, init=False, repr=False)

    @classmethod
    def from_text(cls, path: str, text: str) -> 'SourceFile':
        """Build a SourceFile from already decoded text."""
        return cls(path, text.split('\n'))

    @classmethod
    def read(cls, path: str) -> 'SourceFile':
        """
        Read a file from disk.

        Args:
            path: Path to the C file

        Returns:
            SourceFile for the file content

        Raises:
            OSError: If the file cannot be read
        """
        with open(path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
            text = f.read()
        return cls.from_text(path, text)

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def functions(self) -> List[FunctionSpan]:
        """Function spans, extracted once on first access."""
        if self._functions is None:
            self._functions = extract_functions(self.lines)
        return self._functions


def _is_header_candidate(lines: List[str], index: int) -> bool:
    trimmed = lines[index].strip()
    if '(' not in trimmed or ')' not in trimmed:
        return False

    next_has_brace = index + 1 < len(lines) and '{' in lines[index + 1].strip()
    if '{' not in trimmed and not next_has_brace:
        return False

    if trimmed.startswith('//') or trimmed.startswith('/*'):
        return False

    return not any(keyword in trimmed for keyword in CONTROL_KEYWORDS)


def _parse_header(trimmed: str, line_number: int) -> Optional[FunctionSpan]:
    """Extract name and parameter count from a header line, if possible."""
    paren_pos = trimmed.find('(')
    if paren_pos <= 0:
        return None

    parts = trimmed[:paren_pos].split()
    if not parts:
        return None
    name = parts[-1].lstrip('*')

    rest = trimmed[paren_pos + 1:]
    close_pos = rest.find(')')
    if close_pos < 0:
        return None

    params = rest[:close_pos].strip()
    if params == '' or params == 'void':
        param_count = 0
    else:
        param_count = params.count(',') + 1

    # end_line is filled in when the closing brace is found
    return FunctionSpan(name, line_number, 0, param_count)


def extract_functions(lines: List[str]) -> List[FunctionSpan]:
    """
    Find function spans with a single forward scan.

    A line is a header candidate when it holds both parentheses, it or the
    next line holds an opening brace, it is not a comment and it holds no
    control keyword. The span closes when the brace depth returns to zero.
    Unbalanced braces leave the last span open and unreported.

    Args:
        lines: File lines

    Returns:
        List of FunctionSpan objects in file order
    """
    functions: List[FunctionSpan] = []
    state = ScanState.OUTSIDE_FUNCTION
    pending: Optional[FunctionSpan] = None
    depth = 0

    for index, line in enumerate(lines):
        if _is_header_candidate(lines, index):
            header = _parse_header(line.strip(), index + 1)
            if header is not None:
                pending = header
                state = ScanState.INSIDE_FUNCTION

        depth += line.count('{')
        depth -= line.count('}')

        if state is ScanState.INSIDE_FUNCTION and depth == 0 and '}' in line:
            functions.append(FunctionSpan(
                name=pending.name,
                start_line=pending.start_line,
                end_line=index + 1,
                param_count=pending.param_count
            ))
            pending = None
            state = ScanState.OUTSIDE_FUNCTION

    if state is ScanState.INSIDE_FUNCTION:
        logger.debug(f"Unclosed function '{pending.name}' starting at line {pending.start_line}")

    return functions


def is_blank(line: str) -> bool:
    return line.strip() == ''


def is_snake_case(name: str) -> bool:
    """Lowercase letters, digits and underscores, no underscore at either end."""
    if not SNAKE_CASE_RE.fullmatch(name):
        return False
    return not (name.startswith('_') or name.endswith('_'))


def is_screaming_snake_case(name: str) -> bool:
    """Uppercase letters, digits and underscores, no underscore at either end."""
    if not SCREAMING_SNAKE_CASE_RE.fullmatch(name):
        return False
    return not (name.startswith('_') or name.endswith('_'))


def to_snake_case(name: str) -> str:
    """
    Convert a name to snake_case.

    An underscore is inserted before every uppercase letter except the first
    character, then the result is lowercased ("ABCTest" -> "a_b_c_test").
    """
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append('_')
        result.append(char.lower())
    return ''.join(result)
