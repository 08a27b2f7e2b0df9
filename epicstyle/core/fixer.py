"""
Auto Fixer Module

This module rewrites C files to resolve the style violations that admit a
mechanical fix. The fix passes run in a fixed order on the full line list,
each pass consuming the output of the previous one:

1. empty line compaction (C-L2)
2. indentation normalization (C-L3)
3. declaration splitting (C-L4)
4. comment conversion (C-C1)
5. for loop declaration extraction (C-L5)

Empty line compaction runs first so the blank separator inserted by the for
loop pass is never removed by it. Running the pipeline on its own output
records no further fix.
"""

import os
import re
from typing import List, Optional, Tuple
from dataclasses import dataclass, field
import logging

from ..config import SPLITTABLE_TYPES, TAB_WIDTH
from .collector import EpicstyleError, collect_files
from .source import is_blank, is_snake_case, to_snake_case

logger = logging.getLogger(__name__)

DECLARATION_RE = re.compile(
    r'^(\s*)(' + '|'.join(SPLITTABLE_TYPES) + r')\s+'
    r'([A-Za-z_][A-Za-z0-9_]*(?:\s*,\s*[A-Za-z_][A-Za-z0-9_]*)+)\s*;(.*)$'
)
FOR_DECLARATION_RE = re.compile(
    r'^(\s*)for\s*\(\s*(int|char|float|double)\s+([A-Za-z_][A-Za-z0-9_]*)\s*=\s*([^;]+);(.*)$'
)
INVALID_NAME_CHARS_RE = re.compile(r'[^a-z0-9_]+')


class FixerError(EpicstyleError):
    """A file could not be read or written back."""


@dataclass(frozen=True)
class Fix:
    """A change made (or that would be made in dry run) to a file."""
    rule: str
    description: str
    line: int

    def to_dict(self):
        return {'rule': self.rule, 'description': self.description, 'line': self.line}


@dataclass
class FixResult:
    """Result of fixing a single file."""
    filename: str
    original_line_count: int
    fixed_line_count: int = 0
    fixes: List[Fix] = field(default_factory=list)
    content_modified: bool = False
    new_filename: str = ''

    def to_dict(self):
        return {
            'filename': self.filename,
            'original_line_count': self.original_line_count,
            'fixed_line_count': self.fixed_line_count,
            'fixes': [f.to_dict() for f in self.fixes],
            'content_modified': self.content_modified,
            'new_filename': self.new_filename
        }


@dataclass
class FixOutcome:
    """Outcome of fixing one file of a batch: a result or an error message."""
    filepath: str
    result: Optional[FixResult] = None
    error: Optional[str] = None


def _split_eol(line: str) -> Tuple[str, str]:
    """Separate a trailing carriage return from the line body."""
    if line.endswith('\r'):
        return line[:-1], '\r'
    return line, ''


class AutoFixer:
    """
    Automatic fixer for style violations.

    This class provides:
    - The ordered line rewrite passes
    - Filename casing fixes
    - Dry run support: the same fixes are computed but nothing is written
    """

    def __init__(self, dry_run: bool = False):
        """
        Initialize the auto fixer.

        Args:
            dry_run: Report fixes without writing or renaming files
        """
        self.dry_run = dry_run

    def fix_empty_lines(self, lines: List[str], fixes: List[Fix]) -> List[str]:
        """
        Remove leading blank lines, collapse blank runs and drop trailing blanks (C-L2).

        Args:
            lines: File lines
            fixes: List the applied fixes are appended to

        Returns:
            New list of lines
        """
        start = 0
        while start < len(lines) and is_blank(lines[start]):
            fixes.append(Fix('C-L2', 'Removed empty line at beginning of file', start + 1))
            start += 1

        fixed = []
        previous_blank = False
        for i in range(start, len(lines)):
            blank = is_blank(lines[i])
            if blank and previous_blank:
                fixes.append(Fix('C-L2', 'Removed consecutive empty line', i + 1))
                continue
            fixed.append(lines[i])
            previous_blank = blank

        while fixed and is_blank(fixed[-1]):
            fixes.append(Fix('C-L2', 'Removed empty line at end of file', len(fixed)))
            fixed.pop()

        return fixed

    def fix_indentation(self, lines: List[str], fixes: List[Fix]) -> List[str]:
        """
        Replace each group of 4 leading spaces with a tab (C-L3).

        A remainder of 1 to 3 spaces is kept as is. Lines with fewer than 4
        leading spaces cannot be fixed and are left untouched.
        """
        fixed = []
        for i, line in enumerate(lines):
            if not line.startswith(' '):
                fixed.append(line)
                continue

            space_count = len(line) - len(line.lstrip(' '))
            tab_count, remainder = divmod(space_count, TAB_WIDTH)
            if tab_count == 0:
                fixed.append(line)
                continue

            fixed.append('\t' * tab_count + ' ' * remainder + line[space_count:])
            fixes.append(Fix('C-L3', f'Replaced {space_count} spaces with {tab_count} tabs', i + 1))

        return fixed

    def fix_declarations(self, lines: List[str], fixes: List[Fix]) -> List[str]:
        """
        Split "int a, b, c;" into one declaration per line (C-L4).

        Indentation is kept on every new line. Text after the semicolon stays
        on the last declaration. Lines containing "for" are never split.
        """
        fixed = []
        for i, line in enumerate(lines):
            body, eol = _split_eol(line)
            match = DECLARATION_RE.match(body) if 'for' not in body else None
            if not match:
                fixed.append(line)
                continue

            indent, type_name, names, rest = match.groups()
            variables = [name.strip() for name in names.split(',')]
            for name in variables[:-1]:
                fixed.append(f'{indent}{type_name} {name};{eol}')
            fixed.append(f'{indent}{type_name} {variables[-1]};{rest}{eol}')

            fixes.append(Fix(
                'C-L4',
                f'Split multiple variable declarations into {len(variables)} lines',
                i + 1
            ))

        return fixed

    def fix_comments(self, lines: List[str], fixes: List[Fix]) -> List[str]:
        """
        Convert // comments to /* */ comments (C-C1).

        Only the first "//" of a line starts the comment, and a "//" inside an
        open /* */ comment is left alone. An empty comment is removed along
        with the whitespace before it, and a line left empty by that is
        dropped.
        """
        fixed = []
        for i, line in enumerate(lines):
            body, eol = _split_eol(line)
            position = body.find('//')
            if position < 0:
                fixed.append(line)
                continue

            before = body[:position]
            if before.rfind('/*') > before.rfind('*/'):
                fixed.append(line)
                continue

            comment = body[position + 2:].strip()
            fixes.append(Fix('C-C1', 'Converted // comment to /* */', i + 1))

            if comment:
                fixed.append(f'{before}/* {comment} */{eol}')
                continue

            before = before.rstrip(' \t')
            if before:
                fixed.append(before + eol)

        return fixed

    def fix_for_loops(self, lines: List[str], fixes: List[Fix]) -> List[str]:
        """
        Move a declaration out of a for loop header (C-L5).

        "for (int i = 0; ...)" becomes "int i;", a blank line, and
        "for (i = 0; ...)", all at the loop's indentation.
        """
        fixed = []
        for i, line in enumerate(lines):
            body, eol = _split_eol(line)
            match = FOR_DECLARATION_RE.match(body)
            if not match:
                fixed.append(line)
                continue

            indent, type_name, name, init, rest = match.groups()
            fixed.append(f'{indent}{type_name} {name};{eol}')
            fixed.append(eol)
            fixed.append(f'{indent}for ({name} = {init.strip()};{rest}{eol}')

            fixes.append(Fix('C-L5', 'Extracted variable declaration from for loop', i + 1))

        return fixed

    def fix_lines(self, lines: List[str]) -> Tuple[List[str], List[Fix]]:
        """
        Run every fix pass in order.

        Args:
            lines: File lines

        Returns:
            Tuple of (fixed_lines, fixes)
        """
        fixes: List[Fix] = []
        lines = self.fix_empty_lines(lines, fixes)
        lines = self.fix_indentation(lines, fixes)
        lines = self.fix_declarations(lines, fixes)

        count = len(lines)
        lines = self.fix_comments(lines, fixes)
        if len(lines) != count:
            # dropped comment lines may leave blank runs behind
            lines = self.fix_empty_lines(lines, fixes)

        lines = self.fix_for_loops(lines, fixes)
        return lines, fixes

    def fix_text(self, text: str) -> Tuple[str, List[Fix]]:
        """
        Fix file content given as text.

        Empty content is already compact: it splits to a single empty line
        that joins back to the same empty text.
        """
        if text == '':
            return text, []
        lines, fixes = self.fix_lines(text.split('\n'))
        return '\n'.join(lines), fixes

    def should_fix_filename(self, filepath: str) -> bool:
        """Whether the base name (without extension) is not snake_case."""
        name = os.path.splitext(os.path.basename(filepath))[0]
        return not is_snake_case(name)

    def fixed_filename(self, filepath: str) -> str:
        """
        Path with the base name converted to snake_case ("Dir/MyFile.c" -> "Dir/my_file.c").

        Characters that snake_case does not allow become underscores and
        underscores at either end are dropped ("my-file" -> "my_file",
        "_util" -> "util"). When nothing is left the path is returned as is.
        """
        directory, base = os.path.split(filepath)
        name, ext = os.path.splitext(base)
        new_name = INVALID_NAME_CHARS_RE.sub('_', to_snake_case(name)).strip('_')
        if not new_name:
            return filepath
        return os.path.join(directory, new_name + ext)

    def fix_file(self, filepath: str) -> FixResult:
        """
        Fix a single file.

        In dry run mode the file is never written. Otherwise it is written
        back only when the fixed content differs from the original.

        Args:
            filepath: Path to the C file

        Returns:
            FixResult object

        Raises:
            FixerError: If the file cannot be read or written
        """
        original = self._read_file(filepath)
        original_lines = original.split('\n')

        result = FixResult(
            filename=os.path.basename(filepath),
            original_line_count=len(original_lines)
        )

        fixed, result.fixes = self.fix_text(original)
        result.fixed_line_count = len(fixed.split('\n'))

        if self.should_fix_filename(filepath):
            new_path = self.fixed_filename(filepath)
            if new_path != filepath:
                result.fixes.append(Fix('C-O1', f'Rename file to {os.path.basename(new_path)}', 0))
                result.new_filename = new_path
            else:
                logger.warning(f"No snake_case name can be derived for {filepath}, rename it by hand")

        if not self.dry_run and fixed != original:
            self._write_file(filepath, fixed)
            result.content_modified = True
            logger.info(f"Fixed {filepath}: {len(result.fixes)} fixes")

        return result

    def fix_files(self, filepaths: List[str]) -> List[FixOutcome]:
        """
        Fix several files.

        A file that fails to read or write is reported in its outcome and
        the batch goes on with the next file.
        """
        outcomes = []
        for filepath in filepaths:
            try:
                outcomes.append(FixOutcome(filepath, result=self.fix_file(filepath)))
            except FixerError as e:
                logger.error(str(e))
                outcomes.append(FixOutcome(filepath, error=str(e)))
        return outcomes

    def fix_path(self, path: str) -> List[FixOutcome]:
        """
        Fix a file or every C file under a directory.

        Raises:
            InputPathError: If the path does not exist
        """
        return self.fix_files(collect_files(path))

    def apply_rename(self, filepath: str, result: FixResult) -> Optional[str]:
        """
        Rename a file to the snake_case name computed by fix_file.

        Nothing happens in dry run mode or when no rename is needed.

        Returns:
            The new path, or None when the file was not renamed

        Raises:
            FixerError: If the target exists or the rename fails
        """
        if self.dry_run or not result.new_filename:
            return None

        target_exists = os.path.exists(result.new_filename)
        if target_exists and not os.path.samefile(filepath, result.new_filename):
            raise FixerError(f"Cannot rename {filepath}: {result.new_filename} already exists")

        try:
            os.rename(filepath, result.new_filename)
        except OSError as e:
            raise FixerError(f"Failed to rename {filepath} to {result.new_filename}: {e}") from e

        logger.info(f"Renamed {filepath} -> {result.new_filename}")
        return result.new_filename

    def _read_file(self, filepath: str) -> str:
        """Read file content without losing undecodable bytes."""
        try:
            with open(filepath, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
                return f.read()
        except OSError as e:
            raise FixerError(f"Failed to read file {filepath}: {e}") from e

    def _write_file(self, filepath: str, content: str):
        try:
            with open(filepath, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
                f.write(content)
        except OSError as e:
            raise FixerError(f"Failed to write file {filepath}: {e}") from e
