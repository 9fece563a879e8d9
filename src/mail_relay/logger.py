# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging utilities for the mail relay.

Modules obtain their logger through :func:`get_logger`; handlers and format
are installed once by :func:`configure_logging` from the process entry point.
Besides the console, two append-only files are written under the log
directory: ``info.log`` (INFO and above) and ``error.log`` (ERROR only).

Example:
    Typical usage in a module::

        from mail_relay.logger import get_logger

        logger = get_logger("Dispatcher")
        logger.info("Email sent")
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_NAME = "info.log"
ERROR_LOG_NAME = "error.log"


def get_logger(name: str = "MailRelay") -> logging.Logger:
    """Retrieve a logger instance.

    No handlers are attached here; that is the job of
    :func:`configure_logging`.

    Args:
        name: The logger name. Defaults to "MailRelay".

    Returns:
        A ``logging.Logger`` instance bound to the given name.
    """
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_dir: str | None = None) -> None:
    """Install console and file handlers on the root logger.

    Args:
        level: Level name for the root logger; unknown names fall back to INFO.
        log_dir: Directory for ``info.log`` and ``error.log``. Created when
            missing. ``None`` disables file logging.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        info_handler = logging.FileHandler(directory / INFO_LOG_NAME, encoding="utf-8")
        info_handler.setLevel(logging.INFO)
        error_handler = logging.FileHandler(directory / ERROR_LOG_NAME, encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.extend([info_handler, error_handler])

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,  # Force reconfiguration to avoid duplicate handlers
    )
