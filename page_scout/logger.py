# === FILE: page_scout/logger.py ===
"""Logging setup for **PageScout**.

One named logger (``PageScout``) is shared by the whole package::

    from page_scout.logger import logger
    logger.warning("robots.txt probe failed: %s", exc)

Entry points call :func:`init_logging` once. Records of a single analysis
can be tagged with the page address through :func:`for_target`, and the
HTTP server pulls aiohttp's own loggers onto the same handlers with
:func:`adopt_aiohttp_loggers`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, MutableMapping, Union

_LOGGER_NAME: Final[str] = "PageScout"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
_AIOHTTP_LOGGERS: Final[tuple[str, ...]] = ("aiohttp.access", "aiohttp.server", "aiohttp.web")

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


def _build_handlers(fmt: str, log_file: Path | str | None) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt)
    # stdout is reserved for report JSON printed by the CLI
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=_MAX_LOG_BYTES, backupCount=3, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _install(lg: logging.Logger, handlers: list[logging.Handler], level: _LevelT, replace: bool) -> None:
    lg.setLevel(level)
    if replace:
        for old in list(lg.handlers):
            lg.removeHandler(old)
            old.close()
    for handler in handlers:
        lg.addHandler(handler)
    lg.propagate = False


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the ``PageScout`` logger.

    Parameters
    ----------
    level
        Numeric or textual level, e.g. ``"DEBUG"``.
    log_file
        Optional logfile, rotated at 5 MB with three backups.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Drop (and close) previously installed handlers first.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    _install(lg, _build_handlers(log_format, log_file), level, replace_handlers)
    return lg


def init_logging(
    level: _LevelT = "WARNING",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Shortcut used by the entry points."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def adopt_aiohttp_loggers() -> None:
    """Route aiohttp server loggers through the ``PageScout`` handlers and level."""
    lg = logging.getLogger(_LOGGER_NAME)
    for name in _AIOHTTP_LOGGERS:
        _install(logging.getLogger(name), list(lg.handlers), lg.level, replace=True)


class TargetAdapter(logging.LoggerAdapter):
    """Prefixes every message with the page being analysed."""

    def process(self, msg: str, kwargs: MutableMapping) -> tuple[str, MutableMapping]:
        return f"[{self.extra['target']}] {msg}", kwargs


def for_target(href: str) -> TargetAdapter:
    return TargetAdapter(logger, {"target": href})


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "adopt_aiohttp_loggers", "for_target", "TargetAdapter"]
