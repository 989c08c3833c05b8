"""
Logging Configuration Module
============================

Modules log through ``logging.getLogger(__name__)``. The CLI calls
:func:`setup_logging` once per invocation so records are rendered by
Rich on stderr and, optionally, appended to a file.

Example
-------
>>> from aws_converge.core.logging import setup_logging
>>> setup_logging(level="DEBUG", log_file="aws-converge.log")
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries whose debug output drowns the poller's own messages
NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    rich_tracebacks: bool = True,
    console: Optional[Console] = None,
) -> None:
    """
    Route all log records through Rich, plus an optional log file.

    Parameters
    ----------
    level : str or int, default="INFO"
        Threshold for both handlers.
    log_file : str, optional
        File to append to. Its lines carry the thread name so that
        parallel syncs can be told apart.
    rich_tracebacks : bool, default=True
        Render exception tracebacks with Rich.
    console : Console, optional
        Console for the Rich handler; stderr by default.

    Notes
    -----
    Existing root handlers are replaced, so repeated calls (one per CLI
    invocation in tests) never duplicate output.
    """
    level = _resolve_level(level)

    handlers = [
        RichHandler(
            console=console or Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=rich_tracebacks,
            tracebacks_show_locals=False,
            markup=False,
        )
    ]
    handlers[0].setFormatter(logging.Formatter(DEFAULT_FORMAT))

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.debug(
        f"Logging configured: level={logging.getLevelName(level)}, "
        f"file={log_file or 'None'}"
    )
