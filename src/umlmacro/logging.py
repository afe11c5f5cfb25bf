"""Structured logging for the macro.

Spans time an operation, collect attributes and emit a single loguru record
when the operation finishes (or fails).
"""

from __future__ import annotations

import sys
import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from loguru import logger

__all__ = ["LogSpan", "configure_logging", "log"]

LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[span]}</cyan> {message}"
)


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr at the given level."""
    logger.remove()
    logger.configure(extra={"span": "umlmacro"})
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)


class LogSpan:
    """A structured logging span with timing and attributes."""

    def __init__(self, name: str, **attrs: Any) -> None:
        """Initialize a log span.

        Args:
            name: Span name (e.g., "resolver.resolve")
            **attrs: Initial attributes to log
        """
        self.name = name
        self.attrs: dict[str, Any] = dict(attrs)
        self.start_time = time.time()
        self.error: str | None = None

    def add(self, key: str | None = None, value: Any = None, **attrs: Any) -> LogSpan:
        """Add attributes to the span.

        Args:
            key: Attribute name (optional if using kwargs)
            value: Attribute value (required if key is provided)
            **attrs: Bulk attribute additions (e.g., cached=True)

        Returns:
            Self for method chaining
        """
        if key is not None:
            self.attrs[key] = value
        self.attrs.update(attrs)
        return self

    @property
    def elapsed_ms(self) -> float:
        return round((time.time() - self.start_time) * 1000, 2)

    def _emit(self) -> None:
        entry = {"elapsed_ms": self.elapsed_ms, **self.attrs}
        bound = logger.bind(span=self.name, **entry)
        message = " ".join(f"{k}={v}" for k, v in entry.items())
        if self.error:
            bound.warning(f"{message} error={self.error!r}")
        else:
            bound.debug(message)


@contextmanager
def log(name: str, **attrs: Any) -> Generator[LogSpan, None, None]:
    """Context manager for structured logging.

    Example:
        >>> with log("store.write", key="abc") as span:
        ...     span.add(size=42)
    """
    span = LogSpan(name, **attrs)
    try:
        yield span
    except Exception as e:
        span.error = f"{type(e).__name__}: {e}"
        raise
    finally:
        span._emit()
