"""
Structured logging for the back-office finance core.

Responsibility:
    Every record under the ``backoffice`` logger namespace is written as
    one JSON object per line.  The object carries the event name as
    ``message``, the fields bound in ``LogContext`` (journal number, report
    type, acting user...) and whatever the call site passed in ``extra``.

Architecture position:
    Kernel leaf.  Imported by every other package; imports nothing from
    them.

Invariants:
    - Context fields never leak between tasks: they live in ContextVars.
    - ``configure_logging`` installs exactly one handler however often it
      is called, until ``reset_logging`` is called.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

ROOT_LOGGER_NAME = "backoffice"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"backoffice_{name}", default=None)
    for name in (
        "correlation_id",
        "actor_id",
        "entry_id",
        "journal_number",
        "report_type",
        "trace_id",
    )
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _CONTEXT_VARS[name]
    except KeyError:
        raise TypeError(f"unknown log context field: {name!r}") from None


class LogContext:
    """
    Fields attached to every record logged in the current context.

    ``set`` ignores None values so callers can pass optional identifiers
    through unchanged; ``bind`` scopes fields to a ``with`` block and
    restores the previous values on exit, so nested binds stack.
    """

    FIELDS = tuple(_CONTEXT_VARS)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                var.set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: value
            for name, var in _CONTEXT_VARS.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        tokens = [
            (var, var.set(value))
            for var, value in ((_context_var(n), v) for n, v in fields.items())
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else on a record came from extra=
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Exception)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    return repr(value)


class StructuredFormatter(logging.Formatter):
    """One JSON line per record: envelope, context, extras, then exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))
        return json.dumps(payload, default=_json_default)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        error = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(error).__name__,
            "exc_message": str(error),
        }
        code = getattr(error, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # BackofficeError subclasses keep their details as public attributes
        fields.update(
            (f"exc_{name}", value)
            for name, value in vars(error).items()
            if not name.startswith("_") and name not in ("args", "code")
        )
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the ``backoffice`` namespace."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_setup_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Route the ``backoffice`` namespace through a StructuredFormatter.

    Records do not propagate to the root logger.  Calls after the first
    are ignored until ``reset_logging``.
    """
    global _installed_handler
    with _setup_lock:
        if _installed_handler is not None:
            return
        _installed_handler = (
            handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        )
        _installed_handler.setFormatter(StructuredFormatter())

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(_installed_handler)


def reset_logging() -> None:
    """Remove all handlers from the ``backoffice`` namespace (tests only)."""
    global _installed_handler
    with _setup_lock:
        _installed_handler = None
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
