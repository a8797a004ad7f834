"""Services for the back-office kernel (write side)."""

from backoffice_kernel.services.journal_ledger import JournalEntryLedger
from backoffice_kernel.services.ledger_store import LedgerStore
from backoffice_kernel.services.reversal_service import ReversalEngine, ReversalResult

__all__ = [
    "JournalEntryLedger",
    "LedgerStore",
    "ReversalEngine",
    "ReversalResult",
]
