"""ORM models for the back-office kernel."""

from backoffice_kernel.models.journal import (
    GLEntryModel,
    JournalEntryModel,
    JournalLineModel,
)

__all__ = [
    "GLEntryModel",
    "JournalEntryModel",
    "JournalLineModel",
]
