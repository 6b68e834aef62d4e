"""Logging utilities for the line grouping pipeline."""

import logging
from typing import Any, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: Union[str, dict[str, Any], None] = "INFO") -> None:
    """Configure logging for the pipeline.

    Args:
        config: Logging level name (DEBUG, INFO, WARNING, ERROR) or the
            ``logging`` section of the settings with ``level``, ``format``
            and an optional ``file``

    """
    if isinstance(config, str) or config is None:
        config = {"level": config or "INFO"}

    level = str(config.get("level", "INFO")).upper()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = config.get("file")
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=config.get("format", DEFAULT_FORMAT),
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance

    """
    return logging.getLogger(name)
