"""Logging setup for hosts that embed the rhyme engine without their own."""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

LOG_LEVEL_ENV = "RHYMES_LOG_LEVEL"
PACKAGE_LOGGER = "rhyme_highlighter"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"

_configured = False


def _level_from(value: Union[str, int, None]) -> int:
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if not text:
        return logging.INFO
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[Union[str, int]] = None, *, force: bool = False) -> None:
    """Attach a root handler and set the level of the package loggers.

    ``level`` wins over ``RHYMES_LOG_LEVEL``; unknown names mean ``INFO``.
    The thread name is part of the format because analysis runs on a worker
    thread. Only the first call has an effect unless ``force`` is passed.
    """

    global _configured

    if _configured and not force:
        return

    resolved = _level_from(level if level is not None else os.environ.get(LOG_LEVEL_ENV))
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)
    _configured = True


__all__ = ["LOG_FORMAT", "LOG_LEVEL_ENV", "PACKAGE_LOGGER", "configure_logging"]
