"""Progress tracking for split and merge runs.

Tracks bytes processed and reports throughput with ETA.
"""

import logging
import time
from typing import Callable, Optional

from .sizes import format_duration, format_size

logger = logging.getLogger(__name__)

# progress_callback(bytes_done, total_bytes, chunk_name)
ProgressCallback = Callable[[int, int, str], None]


class ProgressTracker:
    """Tracks bytes processed and calculates ETA.

    Features:
    - Bytes processed count
    - Throughput (bytes/sec)
    - Estimated time remaining
    - Final "took" summary
    """

    def __init__(self, total_bytes: int, operation: str = "Processing"):
        """Initialize progress tracker.

        Args:
            total_bytes: Total number of bytes to process
            operation: Label used in log messages (e.g. "Split", "Merge")
        """
        self.total_bytes = total_bytes
        self.operation = operation

        self.bytes_processed = 0
        self.start_time = time.monotonic()

    def update(self, bytes_processed: int, item: Optional[str] = None) -> None:
        """Update progress with current byte count and log it.

        Args:
            bytes_processed: Total number of bytes processed so far
            item: Name of the chunk just finished
        """
        self.bytes_processed = bytes_processed
        self._log_progress(item)

    def get_progress(self) -> dict:
        """Get current progress statistics.

        Returns:
            Dict with progress metrics
        """
        elapsed_time = time.monotonic() - self.start_time

        rate = self.bytes_processed / elapsed_time if elapsed_time > 0 else 0.0

        if self.total_bytes > 0:
            percentage = (self.bytes_processed / self.total_bytes) * 100
        else:
            percentage = 0.0

        remaining_bytes = self.total_bytes - self.bytes_processed
        if rate > 0 and remaining_bytes > 0:
            eta_seconds = remaining_bytes / rate
        else:
            eta_seconds = 0.0

        return {
            "total_bytes": self.total_bytes,
            "bytes_processed": self.bytes_processed,
            "remaining_bytes": remaining_bytes,
            "percentage": percentage,
            "elapsed_seconds": elapsed_time,
            "rate_bytes_per_sec": rate,
            "eta_seconds": eta_seconds,
        }

    def _log_progress(self, item: Optional[str]) -> None:
        progress = self.get_progress()
        suffix = f" [{item}]" if item else ""

        logger.info(
            f"{self.operation}: {format_size(self.bytes_processed)}/{format_size(self.total_bytes)} "
            f"({progress['percentage']:.1f}%) - "
            f"{format_size(progress['rate_bytes_per_sec'])}/s - "
            f"ETA: {format_duration(progress['eta_seconds'])}{suffix}"
        )

    def log_final_summary(self) -> None:
        """Log final progress summary with elapsed time."""
        elapsed_time = time.monotonic() - self.start_time
        rate = self.bytes_processed / elapsed_time if elapsed_time > 0 else 0.0

        logger.info(
            f"{self.operation} took {format_duration(elapsed_time)}: "
            f"{format_size(self.bytes_processed)} "
            f"({format_size(rate)}/s average)"
        )
