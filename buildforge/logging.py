from __future__ import annotations

import logging
import os

_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_configured = False


def _level_from(value: str | None) -> int:
    level = logging.getLevelName((value or "WARNING").upper())
    return level if isinstance(level, int) else logging.WARNING


def _ensure_base_logger() -> None:
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=_level_from(os.getenv("BUILDFORGE_LOG_LEVEL")),
        format=_FORMAT,
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    _ensure_base_logger()
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """Override the level picked from BUILDFORGE_LOG_LEVEL."""
    _ensure_base_logger()
    logging.getLogger("buildforge").setLevel(_level_from(level))
