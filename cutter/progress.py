"""
ProgressReporter - Throttled progress output for long batches.
"""

import logging
from typing import Optional


def report_threshold(total: int) -> int:
    """Report every ~4% of the batch, at most every 25 units."""
    return max(1, min(25, total * 25 // 100))


def should_report(current: int, total: int, verbose: bool = False) -> bool:
    """Whether an update for current/total should be emitted."""
    if verbose:
        return True
    return current == 0 or current == total or current % report_threshold(total) == 0


class ProgressReporter:
    """
    Emits "<label> <current>/<total>" lines through logging.

    Purely observational: callers never branch on its output.
    """

    def __init__(self, verbose: bool = False, logger: Optional[logging.Logger] = None):
        """
        Initialize progress reporter.

        Args:
            verbose: If True, emit every update
            logger: Optional logger instance
        """
        self.verbose = verbose
        self.logger = logger or logging.getLogger(__name__)
        self.last_reported: Optional[int] = None

    def report(
        self,
        current: int,
        total: int,
        label: str,
        verbose: Optional[bool] = None
    ) -> bool:
        """
        Report progress.

        Args:
            current: Completed units so far
            total: Units in the batch
            label: Prefix such as 'Processed' or 'Downloaded'
            verbose: Overrides the instance setting for this call

        Returns:
            True if a line was emitted
        """
        if verbose is None:
            verbose = self.verbose
        if not should_report(current, total, verbose):
            return False

        self.last_reported = current
        self.logger.info(f"{label} {current}/{total}")
        return True

    def __call__(self, current: int, total: int, label: str) -> bool:
        """Allow use as callback."""
        return self.report(current, total, label)
