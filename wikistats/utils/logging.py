"""Logging helpers shared across the extraction and resolution stages."""
from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGER_CACHE: dict[str, logging.Logger] = {}


def _level_from_env(default: int = logging.INFO) -> int:
    raw = os.getenv("WIKISTATS_LOG_LEVEL")
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def configure_root_logger(level: Optional[int] = None) -> None:
    """Configure the root logger once, honouring ``WIKISTATS_LOG_LEVEL``."""
    if logging.getLogger().handlers:
        return
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logging.basicConfig(level=level if level is not None else _level_from_env(), handlers=[handler])


def set_log_level(level: str | int) -> None:
    """Apply a level taken from configuration to the package loggers."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    logging.getLogger("wikistats").setLevel(level)
    for logger in _LOGGER_CACHE.values():
        logger.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Retrieve a configured logger, caching it for reuse."""
    if name is None:
        name = os.getenv("APP_LOGGER_NAME", "wikistats")
    if name not in _LOGGER_CACHE:
        configure_root_logger()
        _LOGGER_CACHE[name] = logging.getLogger(name)
    return _LOGGER_CACHE[name]
