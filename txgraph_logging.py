"""Logging setup for the txgraph renderer and its configuration module."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

import config
from errors import ConfigurationError

# loggers that follow the configured level
PACKAGE_LOGGERS = ("txgraph", "config")
# chatty dependencies, never below WARNING
QUIET_LOGGERS = ("pytoniq_core", "blake3")

_HANDLER_NAME = "txgraph-console"
_configured = False


def resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(str(level).strip().upper())
    if not isinstance(numeric, int):
        raise ConfigurationError(f"Unknown logging level: {level!r}")
    return numeric


def _read(logging_settings: Any, key: str) -> Any:
    if isinstance(logging_settings, Mapping):
        return logging_settings.get(key)
    return getattr(logging_settings, key, None)


def configure(logging_settings: Optional[Any] = None, *, force: bool = True) -> int:
    """
    Install one console handler on the root logger and set txgraph levels.

    ``logging_settings`` is a ``config.LoggingSettings`` or a mapping with the
    same keys; missing values come from ``config.settings.logging``. Returns the
    numeric level applied to the package loggers.
    """
    global _configured
    defaults = config.settings.logging
    if logging_settings is None:
        logging_settings = defaults
    level = resolve_level(_read(logging_settings, "level") or defaults.level)
    if _configured and not force:
        return level

    formatter = logging.Formatter(
        _read(logging_settings, "format") or defaults.format,
        _read(logging_settings, "datefmt") or defaults.datefmt,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(max(logging.WARNING, level))
    for handler in root_logger.handlers[:]:
        if handler.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(handler)
    console_handler = logging.StreamHandler()
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))

    _configured = True
    return level


__all__ = ["PACKAGE_LOGGERS", "QUIET_LOGGERS", "configure", "resolve_level"]
