"""Incremental statistics for a job run."""

from typing import Any

from autorank.jobs.models import JobStats


class StatsAggregator:
    """Derives running totals from per-batch outcomes.

    The aggregator is the only writer of its ``JobStats``; observers get copies
    through ``snapshot``.
    """

    def __init__(self) -> None:
        self._stats = JobStats()

    def reset(self) -> None:
        """Zero every counter."""
        self._stats = JobStats()

    def initialize(self, total_records: int, batches_total: int) -> JobStats:
        """Start a run with known totals and all progress counters at zero."""
        self._stats = JobStats(total_records=total_records, batches_total=batches_total)
        return self.snapshot()

    def record_batch(self, size: int, success: bool) -> dict[str, Any]:
        """Account for one finished batch.

        Args:
            size: Number of records in the batch.
            success: Whether the upload succeeded.

        Returns:
            dict[str, Any]: The counters that changed, for stats-updated notifications.

        Raises:
            ValueError: If the batch would push the totals past the run's totals.
        """
        stats = self._stats
        if size < 0:
            raise ValueError(f"Batch size cannot be negative: {size}")
        if stats.processed_records + size > stats.total_records:
            raise ValueError(
                f"Batch of {size} exceeds remaining records "
                f"({stats.total_records - stats.processed_records})"
            )
        if stats.batches_completed + 1 > stats.batches_total:
            raise ValueError("All batches are already accounted for")

        stats.processed_records += size
        stats.batches_completed += 1
        changed: dict[str, Any] = {
            "processed_records": stats.processed_records,
            "batches_completed": stats.batches_completed,
        }
        if success:
            stats.success_count += size
            changed["success_count"] = stats.success_count
        else:
            stats.error_count += size
            changed["error_count"] = stats.error_count
        return changed

    def snapshot(self) -> JobStats:
        """Copy of the current totals."""
        return self._stats.model_copy()
