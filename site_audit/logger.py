"""Logging setup for **SiteAudit**.

Every module logs through the ``SiteAudit`` logger or one of its children
(``SiteAudit.audit``, ``SiteAudit.fetcher``)::

    from site_audit.logger import get_logger
    log = get_logger("audit")
    log.info("Auditing %s", url)

Nothing is printed until :func:`configure` attaches the console handler
(and, optionally, a rotating log file). The CLI calls it once at start-up.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Iterator, Optional, Union

# --------------------------------------------------------------------------- #
# Constants                                                                   #
# --------------------------------------------------------------------------- #

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteAudit"
MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
LOG_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


def _handlers(log_file: Union[str, Path, None], fmt: str) -> Iterator[logging.Handler]:
    """Console handler first, then the rotating file when *log_file* is set."""
    formatter = logging.Formatter(fmt)
    targets: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        targets.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=MAX_LOG_BYTES,
                backupCount=LOG_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in targets:
        handler.setFormatter(formatter)
        yield handler


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def parse_level(level: _LevelT) -> Optional[int]:
    """Numeric value of *level*, or ``None`` when the name is unknown.

    Names are case-insensitive and ``WARN`` is accepted for ``WARNING``.
    """
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name == "WARN":
        name = "WARNING"
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach output handlers to the ``SiteAudit`` logger and set its level.

    Parameters
    ----------
    level
        Level name or number; unknown names mean INFO.
    log_file
        Optional path of a size-rotated log file, in addition to stdout.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Close and drop handlers from an earlier call before adding new ones.
    """
    root = get_logger()
    resolved = parse_level(level)
    root.setLevel(logging.INFO if resolved is None else resolved)

    if replace_handlers:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    for handler in _handlers(log_file, log_format):
        root.addHandler(handler)

    root.propagate = False
    return root


logger: logging.Logger = get_logger()

__all__ = ["logger", "configure", "get_logger", "parse_level", "DEFAULT_FORMAT", "LOGGER_NAME"]
