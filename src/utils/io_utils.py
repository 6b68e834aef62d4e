"""IO utilities: settings loading and text source access."""

import copy
import functools
import gzip
import logging
from pathlib import Path
from typing import IO, Any, Union

import yaml

from src.utils.logging_utils import get_logger

logger = get_logger(__name__)

# Settings loading counter for debugging
_settings_load_count = 0

GROUPING_STRATEGIES = ("first_match", "union_find")
RECORD_ORDERS = ("arrival", "sorted")

DEFAULTS: dict[str, Any] = {
    "data": {
        "input_file": "data/raw/lng-4.txt.gz",
        "encoding": "utf-8",
    },
    "records": {
        "delimiter": ";",
        "empty_marker": '""',
        "token_pattern": r"\d*",
    },
    "grouping": {
        "strategy": "first_match",
        "record_order": "arrival",
        "progress_every": 100_000,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "file": None,
    },
}


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``update`` into ``base`` in place and return ``base``."""
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


@functools.lru_cache(maxsize=1)
def load_settings(path: str) -> dict[str, Any]:
    """Load settings from YAML file with defaults.

    This function is cached to prevent repeated file I/O and parsing.
    Use reload_settings() to force a fresh load. Callers that modify the
    result should copy it first.

    Args:
        path: Path to settings YAML file

    Returns:
        Dictionary with settings (user config merged over defaults)

    """
    global _settings_load_count
    _settings_load_count += 1

    logger.debug(f"Settings loaded (count: {_settings_load_count}) from {path}")

    defaults = copy.deepcopy(DEFAULTS)
    try:
        with open(path, encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logging.warning(f"Settings file not found: {path}. Using defaults.")
        return defaults
    except (OSError, yaml.YAMLError) as e:
        logging.exception(f"Error loading settings: {e}. Using defaults.")
        return defaults

    if not isinstance(user_config, dict):
        logging.warning(f"Settings file {path} does not contain a mapping. Using defaults.")
        return defaults

    return deep_merge(defaults, user_config)


def reload_settings(path: str) -> dict[str, Any]:
    """Force reload settings from file (clears cache).

    Args:
        path: Path to settings YAML file

    Returns:
        Freshly loaded settings

    """
    load_settings.cache_clear()
    return load_settings(path)


def get_settings_load_count() -> int:
    """Get the total number of times settings have been loaded.

    Returns:
        Count of settings loads (for debugging)

    """
    return _settings_load_count


def validate_settings(settings: dict[str, Any]) -> list[str]:
    """Returns list of validation problems.

    Args:
        settings: Settings dict to validate

    Returns:
        List of human-readable problems, empty when the settings are usable

    """
    problems = []
    records = settings.get("records", {})
    grouping = settings.get("grouping", {})

    delimiter = records.get("delimiter")
    if not isinstance(delimiter, str) or not delimiter:
        problems.append(f"records.delimiter must be a non-empty string, got {delimiter!r}")

    empty_marker = records.get("empty_marker")
    if not isinstance(empty_marker, str):
        problems.append(f"records.empty_marker must be a string, got {empty_marker!r}")

    if not isinstance(records.get("token_pattern"), str):
        problems.append(
            f"records.token_pattern must be a string, got {records.get('token_pattern')!r}"
        )

    strategy = grouping.get("strategy")
    if strategy not in GROUPING_STRATEGIES:
        problems.append(f"grouping.strategy must be one of {GROUPING_STRATEGIES}, got {strategy!r}")

    record_order = grouping.get("record_order")
    if record_order not in RECORD_ORDERS:
        problems.append(
            f"grouping.record_order must be one of {RECORD_ORDERS}, got {record_order!r}"
        )

    progress_every = grouping.get("progress_every")
    if not isinstance(progress_every, int) or progress_every < 1:
        problems.append(f"grouping.progress_every must be int >= 1, got {progress_every!r}")

    return problems


def open_text_source(path: Union[str, Path], encoding: str = "utf-8") -> IO[str]:
    """Open a plain or gzip-compressed text file for line reading.

    Compression is detected from the ``.gz`` suffix. Undecodable bytes
    become U+FFFD, so such lines fail record validation instead of aborting
    the read.

    Args:
        path: Path to the source file
        encoding: Text encoding of the (decompressed) content

    Returns:
        Text file object; the caller closes it

    Raises:
        FileNotFoundError: If the file doesn't exist

    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if path.suffix.lower() == ".gz":
        return gzip.open(path, "rt", encoding=encoding, errors="replace", newline="")
    return open(path, encoding=encoding, errors="replace", newline="")
