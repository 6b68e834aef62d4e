"""Pipeline orchestration and CLI for line grouping.

This module handles:
- Settings loading and CLI overrides
- Reading unique, valid records from a plain or gzip source
- Grouping records that share a value in the same column
- Writing the group report and an optional JSON run summary
"""

import argparse
import copy
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from src.grouping import GroupingStats, run_grouping
from src.ingest import IngestStats, read_unique_records
from src.performance import PerformanceTracker, save_performance_summary
from src.reporting import summarize_groups, write_groups_frame, write_groups_report
from src.utils.hash_utils import partition_fingerprint
from src.utils.io_utils import (
    GROUPING_STRATEGIES,
    RECORD_ORDERS,
    load_settings,
    validate_settings,
)
from src.utils.logging_utils import setup_logging
from src.utils.path_utils import get_config_path
from src.utils.perf_utils import time_stage, track_memory_peak

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    groups_written: int
    ingest_stats: IngestStats
    grouping_stats: GroupingStats
    group_stats: dict[str, Any] = field(default_factory=dict)
    summary: Optional[dict[str, Any]] = None


def resolve_settings(
    config_path: Union[str, Path],
    strategy: Optional[str] = None,
    record_order: Optional[str] = None,
) -> dict[str, Any]:
    """Load settings and apply CLI overrides.

    Raises:
        ValueError: If the resulting settings are not usable

    """
    settings = copy.deepcopy(load_settings(str(config_path)))
    if strategy is not None:
        settings["grouping"]["strategy"] = strategy
    if record_order is not None:
        settings["grouping"]["record_order"] = record_order

    problems = validate_settings(settings)
    if problems:
        raise ValueError("Invalid settings: " + "; ".join(problems))
    return settings


def run_pipeline(
    input_path: Optional[str],
    output_path: str,
    config_path: str,
    enable_progress: bool = False,
    strategy: Optional[str] = None,
    record_order: Optional[str] = None,
    summary_path: Optional[str] = None,
    csv_path: Optional[str] = None,
) -> PipelineResult:
    """Run the complete grouping pipeline.

    Args:
        input_path: Path to the input file (None uses ``data.input_file`` from settings)
        output_path: Path of the group report to write
        config_path: Path to configuration file
        enable_progress: Enable tqdm progress bars
        strategy: Grouping strategy override
        record_order: Record order override
        summary_path: Where to write the JSON run summary (optional)
        csv_path: Where to write the report rows as CSV (optional)

    Returns:
        PipelineResult with counters and, when requested, the summary

    Raises:
        FileNotFoundError: If the input file doesn't exist
        ValueError: If the settings are not usable

    """
    try:
        settings = resolve_settings(config_path, strategy, record_order)
    except ValueError:
        logger.exception("Invalid configuration:")
        raise

    # Setup logging early to ensure proper formatting for all subsequent logs
    setup_logging(settings.get("logging", {}))
    logger.info("Starting line grouping pipeline")

    records_cfg = settings["records"]
    grouping_cfg = settings["grouping"]
    source = input_path or settings["data"]["input_file"]
    if not os.path.exists(source):
        raise FileNotFoundError(f"Input file not found: {source}")

    tracker = PerformanceTracker()
    tracker.start_run(settings)

    try:
        logger.info("Loading lines from file to save unique and valid lines only...")
        with time_stage("ingest", logger, tracker.record_timing):
            records, ingest_stats = read_unique_records(
                source,
                token_pattern=records_cfg["token_pattern"],
                delimiter=records_cfg["delimiter"],
                encoding=settings["data"].get("encoding", "utf-8"),
                enable_progress=enable_progress,
                progress_every=grouping_cfg["progress_every"],
            )
        logger.info(f"Number of prepared lines = {ingest_stats.unique_records}.")

        logger.info("Lines processing: grouping...")
        with time_stage("grouping", logger, tracker.record_timing), track_memory_peak(
            "grouping", logger
        ):
            groups, grouping_stats = run_grouping(
                records,
                strategy=grouping_cfg["strategy"],
                record_order=grouping_cfg["record_order"],
                delimiter=records_cfg["delimiter"],
                empty_marker=records_cfg["empty_marker"],
                enable_progress=enable_progress,
                progress_every=grouping_cfg["progress_every"],
            )
        # Records are only referenced by the groups from here on
        del records

        with time_stage("report", logger, tracker.record_timing):
            groups_written = write_groups_report(groups, output_path)
            if csv_path:
                write_groups_frame(groups, csv_path)
            group_stats = summarize_groups(groups)
            group_stats["partition_fingerprint"] = partition_fingerprint(groups)

        tracker.end_run()
        logger.info(f"Groups with more than one element: {groups_written}.")
        logger.info(f"Execution time: {int(tracker.elapsed_sec)}s.")

        summary = None
        if summary_path:
            summary = tracker.generate_summary(
                ingest_stats.to_dict(), group_stats, grouping_stats.to_dict()
            )
            save_performance_summary(summary, summary_path)

        return PipelineResult(
            groups_written=groups_written,
            ingest_stats=ingest_stats,
            grouping_stats=grouping_stats,
            group_stats=group_stats,
            summary=summary,
        )
    except Exception:
        logger.exception("Pipeline failed with exception:")
        raise
    finally:
        if tracker.end_time is None:
            tracker.end_run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Group lines that share a value in the same column",
    )
    parser.add_argument("output", help="Output report file path (e.g. groups.txt)")
    parser.add_argument(
        "--input",
        help="Input data file path, plain text or .gz (default: data.input_file from config)",
    )
    parser.add_argument(
        "--config",
        default=str(get_config_path()),
        help="Configuration file path",
    )
    parser.add_argument(
        "--strategy",
        choices=list(GROUPING_STRATEGIES),
        help="Grouping strategy (default: grouping.strategy from config)",
    )
    parser.add_argument(
        "--record-order",
        choices=list(RECORD_ORDERS),
        help="Record processing order (default: grouping.record_order from config)",
    )
    parser.add_argument("--summary", help="Write a JSON run summary to this path")
    parser.add_argument("--csv", help="Also write the grouped records as CSV to this path")
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Enable tqdm progress bars",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Line Grouping Pipeline v{__version__}",
        help="Show version information and exit",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        run_pipeline(
            input_path=args.input,
            output_path=args.output,
            config_path=args.config,
            enable_progress=args.progress,
            strategy=args.strategy,
            record_order=args.record_order,
            summary_path=args.summary,
            csv_path=args.csv,
        )
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user (Ctrl+C)")
        sys.exit(130)  # Standard exit code for interrupt
    except Exception:
        sys.exit(87)  # Exit with code 87 after full traceback has been logged


if __name__ == "__main__":
    main()
