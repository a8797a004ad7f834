"""
Non-fatal data integrity findings.

Report builders never raise on questionable data.  They compute a result
anyway and attach ``DataIntegrityWarning`` values for the presentation
layer to display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backoffice_kernel.logging_config import get_logger

logger = get_logger("domain.integrity")


# Warning codes
TRIAL_BALANCE_OUT_OF_BALANCE = "trial_balance_out_of_balance"
BALANCE_SHEET_OUT_OF_BALANCE = "balance_sheet_out_of_balance"
UNKNOWN_ACCOUNT_IN_LEDGER = "unknown_account_in_ledger"
EMPTY_PERIOD = "empty_period"


@dataclass(frozen=True)
class DataIntegrityWarning:
    """A problem found in input data that did not block computation."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


def integrity_warning(
    code: str,
    message: str,
    **details: Any,
) -> DataIntegrityWarning:
    """Create a warning and log it once at WARNING level."""
    logger.warning(
        "data_integrity_warning",
        extra={"warning_code": code, "warning_message": message, **details},
    )
    return DataIntegrityWarning(code=code, message=message, details=details)


def empty_period_warning(report: str, **details: Any) -> DataIntegrityWarning:
    return integrity_warning(
        EMPTY_PERIOD,
        f"No eligible records found for {report}",
        report=report,
        **details,
    )
