"""Path utilities for the line grouping pipeline."""

from pathlib import Path
from typing import Union


def ensure_directory_exists(directory_path: Union[str, Path]) -> None:
    """Create directory if it doesn't exist.

    Args:
        directory_path: Path to the directory to create

    """
    Path(directory_path).mkdir(parents=True, exist_ok=True)


def ensure_parent_exists(file_path: Union[str, Path]) -> Path:
    """Create the parent directory of a file path and return the path."""
    path = Path(file_path)
    if path.parent != Path("."):
        ensure_directory_exists(path.parent)
    return path


def get_config_path(filename: str = "settings.yaml") -> Path:
    """Get the path to a config file.

    Args:
        filename: Name of the config file (default: settings.yaml)

    Returns:
        Path to the config file, relative to the directory that holds ``config/``

    """
    current = Path.cwd()

    # Look for config directory in current and parent directories
    for parent in [current] + list(current.parents):
        config_dir = parent / "config"
        if config_dir.exists() and (config_dir / filename).exists():
            return config_dir / filename

    # Fallback: assume we're in project root
    return Path("config") / filename
