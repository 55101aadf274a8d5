"""Diagnostics sink handed to the processor and modifier at construction.

The core never reaches for a global logger.  ``StructlogDiagnostics`` wraps
the stdlib ``antimoji`` logger with structlog processors, so output follows
whatever handlers the embedding application (or ``configure_logging``)
installs.
"""

from __future__ import annotations
import logging
import sys
from typing import Any, Protocol, TextIO

import structlog
from structlog.processors import JSONRenderer, KeyValueRenderer, TimeStamper, add_log_level

LOGGER_NAME = "antimoji"


class Diagnostics(Protocol):
    def debug(self, event: str, **fields: Any) -> None: ...
    def info(self, event: str, **fields: Any) -> None: ...
    def warning(self, event: str, **fields: Any) -> None: ...
    def error(self, event: str, **fields: Any) -> None: ...


class StructlogDiagnostics:
    """Default sink: structured key/value events on the ``antimoji`` logger."""

    __slots__ = ("_log",)

    def __init__(self, logger: Any = None) -> None:
        if logger is None:
            logger = structlog.wrap_logger(
                logging.getLogger(LOGGER_NAME),
                processors=[
                    structlog.stdlib.filter_by_level,
                    add_log_level,
                    TimeStamper(fmt="iso"),
                    KeyValueRenderer(key_order=["timestamp", "level", "event"]),
                ],
                wrapper_class=structlog.stdlib.BoundLogger,
            )
        self._log = logger

    def bind(self, **context: Any) -> "StructlogDiagnostics":
        return StructlogDiagnostics(self._log.bind(**context))

    def debug(self, event: str, **fields: Any) -> None:
        self._log.debug(event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log.info(event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log.warning(event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log.error(event, **fields)


class NullDiagnostics:
    """Discards everything."""

    def debug(self, event: str, **fields: Any) -> None:
        pass

    def info(self, event: str, **fields: Any) -> None:
        pass

    def warning(self, event: str, **fields: Any) -> None:
        pass

    def error(self, event: str, **fields: Any) -> None:
        pass


def configure_logging(
    level: str | int = "WARNING",
    *,
    fmt: str = "console",
    stream: TextIO | None = None,
) -> StructlogDiagnostics:
    """Attach a stderr handler to the ``antimoji`` logger (CLI use).

    ``fmt="json"`` renders one JSON object per event instead of key=value.
    Returns a sink bound to the configured logger.
    """
    std_logger = logging.getLogger(LOGGER_NAME)
    std_logger.setLevel(level if isinstance(level, int) else level.upper())
    for handler in list(std_logger.handlers):
        std_logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    std_logger.addHandler(handler)
    std_logger.propagate = False

    renderer = JSONRenderer() if fmt == "json" else KeyValueRenderer(
        key_order=["timestamp", "level", "event"],
    )
    return StructlogDiagnostics(structlog.wrap_logger(
        std_logger,
        processors=[
            structlog.stdlib.filter_by_level,
            add_log_level,
            TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    ))
