"""
ORM-level immutability enforcement for posted ledger data.

Posted transactions cannot be modified, only reversed with new entries that
leave a visible trail.  SQLAlchemy fires mapper events before UPDATE/DELETE
statements reach the database; the listeners below inspect attribute history
and abort the flush with ImmutabilityViolationError when a rule is broken.

    session.flush()
         |
         v
    [before_update] --> _check_*_immutability() --> ImmutabilityViolationError
         |
         v
    [before_delete] --> _check_*_delete() --------> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Protected entities:

Entity          | When immutable
----------------|------------------------------------------
JournalEntry    | After status = posted
JournalLine     | When the parent entry is posted
GLEntry         | Always (insert-only)

Fields a posted entry may still change: ``reversed_by_entry_id`` (set once
when the entry is reversed), ``audit_trail`` (the reversal is recorded) and
``updated_at``.

Usage:

    from backoffice_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # create_tables() calls this

Tests that must write forbidden data first call
``unregister_immutability_listeners()``.
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from backoffice_kernel.exceptions import ImmutabilityViolationError
from backoffice_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_POSTED = "posted"
_MUTABLE_AFTER_POSTING = frozenset({"reversed_by_entry_id", "audit_trail", "updated_at"})


def _blocked(entity_type: str, entity_id: str, operation: str, reason: str, field: str | None = None):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": entity_id,
            "operation": operation,
            "field": field,
        },
    )
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
    )


def _check_journal_entry_immutability(mapper, connection, target):
    """
    Prevent updates to posted JournalEntry rows.

    The posting transition itself (status changing TO posted) is allowed;
    anything after it is blocked except the reversal link fields.
    """
    status_history = get_history(target, "status")

    if status_history.deleted:
        was_posted_before = status_history.deleted[0] == _POSTED
    elif not status_history.added:
        was_posted_before = target.status == _POSTED
    else:
        was_posted_before = False

    if not was_posted_before:
        return

    insp = inspect(target)
    for attr in insp.attrs:
        if attr.key in _MUTABLE_AFTER_POSTING or attr.key == "lines":
            continue
        if attr.history.has_changes():
            raise _blocked(
                "JournalEntry",
                str(target.id),
                "UPDATE",
                f"Cannot modify field '{attr.key}' on posted journal entry",
                field=attr.key,
            )


def _check_journal_entry_delete(mapper, connection, target):
    """Posted journal entries cannot be deleted."""
    if target.status == _POSTED:
        raise _blocked(
            "JournalEntry",
            str(target.id),
            "DELETE",
            "Posted journal entries cannot be deleted",
        )


def _check_journal_line_immutability(mapper, connection, target):
    """Journal lines are frozen once the parent entry is posted."""
    if target.entry is not None and target.entry.status == _POSTED:
        raise _blocked(
            "JournalLine",
            str(target.id),
            "UPDATE",
            "Journal lines cannot be modified after parent entry is posted",
        )


def _check_journal_line_delete(mapper, connection, target):
    if target.entry is not None and target.entry.status == _POSTED:
        raise _blocked(
            "JournalLine",
            str(target.id),
            "DELETE",
            "Journal lines cannot be deleted after parent entry is posted",
        )


def _check_gl_entry_immutability(mapper, connection, target):
    raise _blocked(
        "GLEntry",
        str(target.id),
        "UPDATE",
        "GL postings are insert-only",
    )


def _check_gl_entry_delete(mapper, connection, target):
    raise _blocked(
        "GLEntry",
        str(target.id),
        "DELETE",
        "GL postings cannot be deleted",
    )


def _listeners():
    from backoffice_kernel.models.journal import (
        GLEntryModel,
        JournalEntryModel,
        JournalLineModel,
    )

    return (
        (JournalEntryModel, "before_update", _check_journal_entry_immutability),
        (JournalEntryModel, "before_delete", _check_journal_entry_delete),
        (JournalLineModel, "before_update", _check_journal_line_immutability),
        (JournalLineModel, "before_delete", _check_journal_line_delete),
        (GLEntryModel, "before_update", _check_gl_entry_immutability),
        (GLEntryModel, "before_delete", _check_gl_entry_delete),
    )


def register_immutability_listeners():
    """Install the immutability listeners.  Safe to call more than once."""
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)
    logger.debug("immutability_listeners_registered")


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the immutability listeners.

    WARNING: Only use this in tests that need to violate the rules on
    purpose.
    """
    for target, event_name, listener_fn in _listeners():
        _safe_remove_listener(target, event_name, listener_fn)
    logger.debug("immutability_listeners_unregistered")
