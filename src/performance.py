"""Performance monitoring and summary generation for the pipeline.

Provides the run tracker that collects stage timings, peak memory and the
dataset/group counters, and writes them as a JSON run summary.
"""

import json
import logging
import subprocess
import tracemalloc
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from src.utils.hash_utils import stable_schema_hash
from src.utils.path_utils import ensure_parent_exists

logger = logging.getLogger(__name__)

STAGES = ("ingest", "grouping", "report")


class PerformanceTracker:
    """Tracks performance metrics throughout the pipeline."""

    def __init__(self, trace_memory: bool = True) -> None:
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.timings: Dict[str, float] = {}
        self.peak_memory: float = 0.0
        self.config_hash: Optional[str] = None
        self.trace_memory = trace_memory
        self._started_tracing = False

    def start_run(self, config_dict: Dict[str, Any]) -> None:
        """Start tracking performance for a pipeline run."""
        self.start_time = datetime.now(timezone.utc)
        self.config_hash = stable_schema_hash(config_dict)
        if self.trace_memory and not tracemalloc.is_tracing():
            tracemalloc.start()
            self._started_tracing = True
        logger.info(f"Performance tracking started at {self.start_time.isoformat()}")

    def end_run(self) -> None:
        """End performance tracking for a pipeline run."""
        self.end_time = datetime.now(timezone.utc)
        if tracemalloc.is_tracing():
            _, peak = tracemalloc.get_traced_memory()
            self.peak_memory = peak / 1024 / 1024  # Convert to MB
            if self._started_tracing:
                tracemalloc.stop()
                self._started_tracing = False
        logger.info(f"Performance tracking ended at {self.end_time.isoformat()}")

    def record_timing(self, stage: str, duration_sec: float) -> None:
        """Record timing for a pipeline stage."""
        self.timings[stage] = duration_sec
        logger.debug(f"Stage '{stage}' completed in {duration_sec:.2f}s")

    @property
    def elapsed_sec(self) -> float:
        if not self.start_time:
            return 0.0
        end = self.end_time or datetime.now(timezone.utc)
        return (end - self.start_time).total_seconds()

    def get_git_commit(self) -> str:
        """Get current git commit hash."""
        try:
            result = subprocess.run(
                ["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True,
            )
            return result.stdout.strip()[:8]
        except (subprocess.CalledProcessError, FileNotFoundError):
            return "unknown"

    def generate_summary(
        self,
        dataset_stats: Dict[str, int],
        group_stats: Dict[str, Any],
        grouping_stats: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Generate the run summary.

        Args:
            dataset_stats: Ingest counters (lines read, invalid, duplicates, unique)
            group_stats: Output of ``summarize_groups`` plus the partition fingerprint
            grouping_stats: Engine counters (strategy, joins, field keys)

        Returns:
            Summary dict ready for JSON serialization

        """
        if not self.start_time or not self.end_time:
            raise ValueError("Performance tracking not started/ended")

        return {
            "run_meta": {
                "git_commit": self.get_git_commit(),
                "config_hash": self.config_hash,
                "started_at_utc": self.start_time.isoformat(),
                "ended_at_utc": self.end_time.isoformat(),
            },
            "dataset": {
                "lines_read": dataset_stats.get("lines_read", 0),
                "invalid_lines": dataset_stats.get("invalid_lines", 0),
                "duplicate_lines": dataset_stats.get("duplicate_lines", 0),
                "unique_records": dataset_stats.get("unique_records", 0),
            },
            "grouping": {
                "strategy": grouping_stats.get("strategy", "first_match"),
                "joined_existing": grouping_stats.get("joined_existing", 0),
                "empty_records": grouping_stats.get("empty_records", 0),
                "field_keys": grouping_stats.get("field_keys", 0),
            },
            "groups": {
                "count": group_stats.get("count", 0),
                "multi_member_count": group_stats.get("multi_member_count", 0),
                "size_histogram": group_stats.get(
                    "size_histogram", {"1": 0, "2": 0, "3": 0, "4_plus": 0},
                ),
                "max_group_size": group_stats.get("max_group_size", 0),
                "partition_fingerprint": group_stats.get("partition_fingerprint"),
            },
            "timings_sec": {stage: self.timings.get(stage, 0.0) for stage in STAGES},
            "memory": {"tracemalloc_peak_mb": self.peak_memory},
        }


def save_performance_summary(summary: Dict[str, Any], output_path: Union[str, Path]) -> None:
    """Save performance summary to JSON file.

    Args:
        summary: Performance summary dict
        output_path: Output file path

    """
    path = ensure_parent_exists(output_path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
        logger.info(f"Performance summary saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save performance summary: {e}")
        raise
