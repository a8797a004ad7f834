"""
backoffice_engines.tracer -- BACKOFFICE_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` logs one record per call of a pure calculation
    engine: which engine and version ran, a fingerprint of the inputs that
    determine its result, and how long it took.  Two records with the same
    engine, version and fingerprint describe the same computation.

Architecture position:
    Engines.  Logging is the only side effect; arguments and results pass
    through untouched.

Invariants enforced:
    - The fingerprint is a function of the named arguments' values only,
      however they were passed (positionally or by keyword), and is
      independent of dict ordering.
    - Arguments the call leaves at their defaults are fingerprinted with
      their default values.

Usage:
    @traced_engine("aging", "1.0", fingerprint_fields=("items", "as_of"))
    def generate_report(self, items, as_of):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum
from typing import Any

_logger = logging.getLogger("backoffice.engines.tracer")

TRACE_TYPE = "BACKOFFICE_ENGINE_TRACE"

FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return _canonical(value.value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonical(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return type(value).__name__ + _canonical(fields)
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_canonical(v) for v in value)) + "}"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """
    Truncated SHA-256 over ``name=value`` for each fingerprint field.

    A field absent from ``arguments`` hashes the same as None.
    """
    canonical = "|".join(
        f"{name}={_canonical(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Wrap an engine function or method so each call logs a trace record."""

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind(*args, **kwargs)
                bound.apply_defaults()
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 3)

            _logger.info(
                TRACE_TYPE,
                extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": elapsed_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
