"""
Module: backoffice_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    backoffice_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    MUST NOT import backoffice_modules.

Invariants enforced:
    - Purity: engines never read the clock; "now" is always a parameter.
    - Decimal-only arithmetic for monetary amounts.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine invocations are traced via ``@traced_engine`` (see
    ``backoffice_engines.tracer``), emitting BACKOFFICE_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.

Usage:
    from backoffice_engines.aging import AgingCalculator
    from backoffice_engines.variance import BudgetVarianceCalculator
"""

from backoffice_engines.aging import (
    HOTEL_BUCKETS,
    AgeBucket,
    AgedItem,
    AgingCalculator,
    AgingReport,
)
from backoffice_engines.tracer import compute_input_fingerprint, traced_engine
from backoffice_engines.variance import (
    BudgetVarianceCalculator,
    BudgetVarianceResult,
    VarianceStatus,
    percent_of,
)

__all__ = [
    "HOTEL_BUCKETS",
    "AgeBucket",
    "AgedItem",
    "AgingCalculator",
    "AgingReport",
    "BudgetVarianceCalculator",
    "BudgetVarianceResult",
    "VarianceStatus",
    "compute_input_fingerprint",
    "percent_of",
    "traced_engine",
]
