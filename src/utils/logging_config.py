"""
Logging setup shared by scripts and command-line entry points.
"""

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure the root logger with a console handler and an optional file handler.

    Calling it again replaces the previously installed handlers.

    Args:
        level: Logging level (e.g. ``logging.DEBUG`` or ``"DEBUG"``).
        log_file: Optional path of a log file to append to.

    Returns:
        The root logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handlers: list = [logging.StreamHandler()]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    return logging.getLogger()
