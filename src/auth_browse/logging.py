"""Logging for auth-browse.

Diagnostic messages go through loguru. Each browse operation is wrapped in an
``OperationSpan`` that emits one JSON line when the operation ends. The line is
an error when the operation raised and a warning when the page never showed
its authenticated-content marker.
"""

from __future__ import annotations

import json
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from auth_browse.state import ReadinessOutcome

DEFAULT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """Route loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=DEFAULT_FORMAT)


@dataclass
class OperationSpan:
    """Outcome record of one browse operation."""

    operation: str
    attrs: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    _started: float = field(default_factory=time.perf_counter, repr=False)

    def add(self, **attrs: Any) -> OperationSpan:
        self.attrs.update(attrs)
        return self

    @property
    def level(self) -> str:
        if self.error:
            return "ERROR"
        if self.attrs.get("readiness") == ReadinessOutcome.TIMED_OUT.value:
            return "WARNING"
        return "INFO"

    def emit(self) -> None:
        entry: dict[str, Any] = {
            "span": self.operation,
            "elapsed_ms": round((time.perf_counter() - self._started) * 1000, 2),
            **self.attrs,
        }
        if self.error:
            entry["error"] = self.error
        logger.bind(operation=self.operation).log(self.level, json.dumps(entry, default=str))


@contextmanager
def log(operation: str, **attrs: Any) -> Iterator[OperationSpan]:
    """Time ``operation`` and emit its span on exit, re-raising any error."""
    span = OperationSpan(operation, dict(attrs))
    try:
        yield span
    except Exception as e:
        span.error = f"{type(e).__name__}: {e}"
        raise
    finally:
        span.emit()
