from __future__ import annotations

import gzip
import random
from pathlib import Path
from typing import Callable, Iterable

import pytest
from hypothesis import settings

from src.utils.io_utils import load_settings

# ---- Deterministic Testing Configuration ---------------------

# Global deterministic seed
DETERMINISTIC_SEED = 42


@pytest.fixture(autouse=True)
def set_deterministic_seed():
    """Set deterministic seed for all tests"""
    random.seed(DETERMINISTIC_SEED)
    yield
    # Reset after test
    random.seed()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per path; start every test from a clean cache."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


# Hypothesis settings for all property-based tests
settings.register_profile(
    "deterministic",
    deadline=None,
    max_examples=200,
    derandomize=True,
    database=None,
)
settings.load_profile("deterministic")


# ---- Input file helpers --------------------------------------


@pytest.fixture
def write_lines(tmp_path: Path) -> Callable[..., Path]:
    """Write lines to a plain or gzip file under tmp_path and return its path."""

    def _write(lines: Iterable[str], name: str = "input.txt") -> Path:
        path = tmp_path / name
        content = "".join(f"{line}\n" for line in lines)
        if path.suffix == ".gz":
            with gzip.open(path, "wt", encoding="utf-8") as f:
                f.write(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write
