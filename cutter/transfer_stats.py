"""
TransferStats - Statistics for one phase (fetch, transform or publish).
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class TransferStats:
    """
    Statistics for a phase run.

    Attributes:
        total: Units in the phase
        succeeded: Units completed successfully
        skipped: Units filtered out before scheduling
        failed: Units that failed
        bytes_transferred: Total bytes written or transferred
        start_time: Start timestamp
        end_time: End timestamp, set by finish()
        error_details: List of error messages
    """
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    bytes_transferred: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0
    error_details: List[str] = field(default_factory=list)

    def record_success(self, nbytes: int = 0) -> None:
        self.succeeded += 1
        self.bytes_transferred += nbytes

    def record_failure(self, message: str) -> None:
        self.failed += 1
        self.error_details.append(message)

    def finish(self) -> None:
        """Freeze elapsed time."""
        self.end_time = time.time()

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        end = self.end_time or time.time()
        return end - self.start_time

    @property
    def rate_per_second(self) -> float:
        """Completed units per second."""
        if self.elapsed_seconds > 0:
            return self.completed_count / self.elapsed_seconds
        return 0.0

    @property
    def completed_count(self) -> int:
        """Total completed (succeeded + failed)."""
        return self.succeeded + self.failed

    @property
    def remaining_count(self) -> int:
        """Remaining to process."""
        return self.total - self.completed_count
