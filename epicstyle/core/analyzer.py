"""
Style Analyzer Module

This module runs the registered rules against C files, scores each file and
builds the project report.
"""

from typing import List, Dict, Optional
import logging

from ..config import MAX_SCORE, PENALTIES
from .aggregator import FileResult, Report
from .collector import collect_files
from .rules import Rule, Violation, build_registry
from .source import SourceFile

logger = logging.getLogger(__name__)


def calculate_score(violations: List[Violation]) -> float:
    """
    Score a file from its violations.

    Each major violation costs 5 points and each minor one 2 points, starting
    from 100 and never going below 0.
    """
    score = MAX_SCORE
    for violation in violations:
        score -= PENALTIES[violation.severity.value]
    return max(0.0, score)


class StyleAnalyzer:
    """
    Analyzer for C files.

    This class provides:
    - A rule registry built for a verification level
    - Rule evaluation on a single SourceFile
    - File and project level scoring
    """

    def __init__(self, level: int = 1):
        """
        Initialize the analyzer.

        Args:
            level: Verification level (1 = basic, 2 = advanced)
        """
        self.level = level
        self.rules: Dict[str, Rule] = build_registry(level)

    def check_rules(self, source: SourceFile) -> List[Violation]:
        """
        Run every applicable rule against a file.

        Args:
            source: The file to check

        Returns:
            Violations sorted by line then rule code
        """
        violations = []
        for rule in self.rules.values():
            violations.extend(rule.check(source))
        return sorted(violations, key=lambda v: (v.line, v.rule))

    def calculate_score(self, violations: List[Violation]) -> float:
        return calculate_score(violations)

    def analyze_source(self, source: SourceFile) -> FileResult:
        """Analyze an already loaded file."""
        violations = self.check_rules(source)
        return FileResult(
            filename=source.filename,
            violations=violations,
            score=self.calculate_score(violations),
            line_count=source.line_count
        )

    def analyze_file(self, filepath: str) -> FileResult:
        """
        Analyze a single file.

        Args:
            filepath: Path to the C file

        Returns:
            FileResult object

        Raises:
            OSError: If the file cannot be read
        """
        source = SourceFile.read(filepath)
        result = self.analyze_source(source)
        logger.debug(f"{filepath}: {len(result.violations)} violations, score {result.score:.1f}")
        return result

    def analyze_files(self, filepaths: List[str]) -> Report:
        """
        Analyze a list of files.

        Files that cannot be read are logged and skipped; they do not count
        in the report totals.
        """
        results = []
        for filepath in filepaths:
            result = self._analyze_or_skip(filepath)
            if result is not None:
                results.append(result)
        return Report.from_results(results)

    def analyze_path(self, path: str) -> Report:
        """
        Analyze a file or a directory tree.

        Args:
            path: Path to a .c/.h file or a directory

        Returns:
            Report object

        Raises:
            InputPathError: If the path does not exist
        """
        files = collect_files(path)
        if not files:
            logger.info(f"No C files found in {path}")
        return self.analyze_files(files)

    def _analyze_or_skip(self, filepath: str) -> Optional[FileResult]:
        try:
            return self.analyze_file(filepath)
        except OSError as e:
            logger.warning(f"Skipping unreadable file {filepath}: {e}")
            return None
