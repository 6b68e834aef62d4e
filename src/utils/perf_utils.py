"""Performance utilities for the line grouping pipeline.

Stage timing and memory tracking context managers used around the
ingest, grouping and reporting stages.
"""

import logging
import time
import tracemalloc
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Callable, Optional


@contextmanager
def time_stage(
    stage: str,
    logger: logging.Logger,
    on_complete: Optional[Callable[[str, float], None]] = None,
) -> Iterator[None]:
    """Context manager for timing pipeline stages.

    Args:
        stage: Stage name for logging
        logger: Logger instance
        on_complete: Optional callback receiving the stage name and duration

    Yields:
        None

    """
    start_time = time.perf_counter()
    logger.info(f"[stage:start] {stage}")
    try:
        yield
    finally:
        duration = time.perf_counter() - start_time
        logger.info(f"[stage:end] {stage} ({duration:.2f}s)")
        if on_complete is not None:
            on_complete(stage, duration)


@contextmanager
def track_memory_peak(stage: str, logger: logging.Logger) -> Iterator[None]:
    """Context manager logging the tracemalloc peak reached inside a stage.

    If tracemalloc is already tracing (e.g. a PerformanceTracker is running)
    it is left running and the logged value is the peak of the run so far;
    otherwise it is started and stopped around the stage.

    Args:
        stage: Stage name for logging
        logger: Logger instance

    Yields:
        None

    """
    started_here = not tracemalloc.is_tracing()
    if started_here:
        tracemalloc.start()
    try:
        yield
    finally:
        _, peak = tracemalloc.get_traced_memory()
        if started_here:
            tracemalloc.stop()
        logger.info(f"Memory peak at '{stage}': {peak / 1024 / 1024:.1f} MB")
