"""
Aggregator Module

This module holds per-file results and aggregates them into the project
report consumed by the terminal reporter, the JSON output and the dashboard.
"""

from typing import List, Dict, Any
from dataclasses import dataclass, field
from collections import Counter
import logging

from .rules import Violation

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Analysis result for a single file."""
    filename: str
    violations: List[Violation]
    score: float
    line_count: int

    @property
    def is_clean(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filename': self.filename,
            'violations': [v.to_dict() for v in self.violations],
            'score': self.score,
            'line_count': self.line_count
        }


@dataclass
class Report:
    """Aggregated results for every analyzed file."""
    files: List[FileResult] = field(default_factory=list)
    total_score: float = 0.0
    total_files: int = 0
    total_lines: int = 0
    total_violations: int = 0
    clean_files: int = 0

    @classmethod
    def from_results(cls, results: List[FileResult]) -> 'Report':
        """
        Build a report from file results.

        The total score is the unweighted mean of the file scores, and 0 when
        no file was analyzed.
        """
        report = cls(files=list(results))
        report.total_files = len(results)
        report.total_lines = sum(r.line_count for r in results)
        report.total_violations = sum(len(r.violations) for r in results)
        report.clean_files = sum(1 for r in results if r.is_clean)

        if results:
            report.total_score = sum(r.score for r in results) / len(results)

        logger.debug(f"Aggregated {report.total_files} files, total score {report.total_score:.1f}")
        return report

    @property
    def has_violations(self) -> bool:
        return self.total_violations > 0

    @property
    def clean_percentage(self) -> float:
        if self.total_files == 0:
            return 0.0
        return self.clean_files / self.total_files * 100

    def sorted_files(self) -> List[FileResult]:
        """Files ordered by score (best first), then by name."""
        return sorted(self.files, key=lambda r: (-r.score, r.filename))

    def rule_counts(self) -> Dict[str, int]:
        """Number of violations per rule code, most frequent first."""
        counts = Counter(v.rule for r in self.files for v in r.violations)
        return dict(counts.most_common())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'files': [r.to_dict() for r in self.files],
            'total_score': self.total_score,
            'total_files': self.total_files,
            'total_lines': self.total_lines,
            'total_violations': self.total_violations,
            'clean_files': self.clean_files
        }
