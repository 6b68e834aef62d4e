"""Utility modules for the line grouping pipeline.
"""

from .hash_utils import (
    partition_fingerprint,
    stable_group_id,
    stable_schema_hash,
)
from .io_utils import (
    load_settings,
    open_text_source,
    reload_settings,
    validate_settings,
)
from .logging_utils import get_logger, setup_logging
from .path_utils import ensure_directory_exists, get_config_path
from .perf_utils import time_stage, track_memory_peak
from .progress import ProgressLogger
from .union_find import DisjointSet

__all__ = [
    # Hash utilities
    "partition_fingerprint",
    "stable_group_id",
    "stable_schema_hash",
    # IO utilities
    "load_settings",
    "open_text_source",
    "reload_settings",
    "validate_settings",
    # Logging utilities
    "get_logger",
    "setup_logging",
    # Path utilities
    "ensure_directory_exists",
    "get_config_path",
    # Performance utilities
    "ProgressLogger",
    "time_stage",
    "track_memory_peak",
    # Data structures
    "DisjointSet",
]
