"""
Typed Exception Hierarchy for the Back-Office Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A rejected ledger operation must tell the caller exactly what went wrong
without forcing it to parse a message string. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        ledger.transition(entry_id, JournalEntryStatus.POSTED, actor_id)
    except Exception as e:
        if "unbalanced" in str(e):  # FRAGILE - message might change
            show_balance_hint()

Example - RIGHT way (what this module enables):
    try:
        ledger.transition(entry_id, JournalEntryStatus.POSTED, actor_id)
    except UnbalancedEntryError as e:
        show_balance_hint(e.total_debit, e.total_credit)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from BackofficeError:

    BackofficeError (base)
    |
    +-- ValidationError                (user-correctable, lists all violations)
    |
    +-- StateError                     (policy violation, nothing mutated)
    |   +-- UnbalancedEntryError
    |   +-- ImmutableEntryError
    |   +-- InvalidTransitionError
    |   +-- NotPostedError
    |   +-- AlreadyReversedError
    |
    +-- LedgerError
    |   +-- EntryNotFoundError
    |   +-- DuplicateJournalNumberError
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- AccountInactiveError
    |   +-- DuplicateAccountError
    |
    +-- PeriodError
    |   +-- InvalidPeriodError
    |
    +-- ConfigurationError
    |
    +-- PersistenceError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                      | When Raised
-------------|---------------------------|----------------------------------------
Validation   | VALIDATION_FAILED         | Draft entry has one or more violations
-------------|---------------------------|----------------------------------------
State        | UNBALANCED_ENTRY          | Posting with debits != credits
             | IMMUTABLE_ENTRY           | Editing a posted entry
             | INVALID_TRANSITION        | Status change not in the allowed map
             | ENTRY_NOT_POSTED          | Reversing an entry that is not posted
             | ENTRY_ALREADY_REVERSED    | Reversing an entry twice
-------------|---------------------------|----------------------------------------
Ledger       | ENTRY_NOT_FOUND           | Entry ID does not exist
             | DUPLICATE_JOURNAL_NUMBER  | Loaded entries share a journal number
-------------|---------------------------|----------------------------------------
Account      | ACCOUNT_NOT_FOUND         | Account ID does not exist
             | ACCOUNT_INACTIVE          | Account is deactivated
             | DUPLICATE_ACCOUNT         | Account ID or code already registered
-------------|---------------------------|----------------------------------------
Period       | INVALID_PERIOD            | Unknown token or inverted custom range
-------------|---------------------------|----------------------------------------
Config       | CONFIGURATION_ERROR       | Malformed or unknown configuration
-------------|---------------------------|----------------------------------------
Persistence  | IMMUTABILITY_VIOLATION    | Updating or deleting a posted record

===============================================================================
HANDLING PATTERNS
===============================================================================

1. VALIDATION ERRORS carry every violation at once:

    except ValidationError as e:
        for v in e.violations:
            form.mark(v.field, v.message)

2. STATE ERRORS leave the ledger exactly as it was:

    except StateError as e:
        notify_user(e.code, str(e))

3. DATA INTEGRITY problems are NOT exceptions. Report builders attach
   ``DataIntegrityWarning`` values to their results instead of raising.

===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass


class BackofficeError(Exception):
    """
    Base exception for all back-office finance errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BACKOFFICE_ERROR"


# Validation


@dataclass(frozen=True)
class Violation:
    """A single user-correctable problem found while validating a draft."""

    field: str
    code: str
    message: str


class ValidationError(BackofficeError):
    """
    A draft journal entry failed validation.

    All checks run before this is raised, so ``violations`` lists every
    problem at once. The entry (if any) remains editable in its current state.
    """

    code: str = "VALIDATION_FAILED"

    def __init__(self, violations: tuple[Violation, ...] | list[Violation]):
        self.violations = tuple(violations)
        summary = "; ".join(v.message for v in self.violations)
        super().__init__(
            f"Journal entry validation failed ({len(self.violations)} "
            f"violation(s)): {summary}"
        )

    @property
    def violation_codes(self) -> tuple[str, ...]:
        """Codes of all violations, in the order they were found."""
        return tuple(v.code for v in self.violations)


# State (policy) errors


class StateError(BackofficeError):
    """Base exception for operations rejected by ledger policy."""

    code: str = "STATE_ERROR"


class UnbalancedEntryError(StateError):
    """Journal entry debits do not equal credits within tolerance."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, entry_id: str, total_debit: str, total_credit: str):
        self.entry_id = entry_id
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Entry {entry_id} is unbalanced: "
            f"debits={total_debit}, credits={total_credit}"
        )


class ImmutableEntryError(StateError):
    """Attempted to modify a posted journal entry."""

    code: str = "IMMUTABLE_ENTRY"

    def __init__(self, entry_id: str, journal_number: str):
        self.entry_id = entry_id
        self.journal_number = journal_number
        super().__init__(
            f"Journal entry {journal_number} is posted and cannot be modified"
        )


class InvalidTransitionError(StateError):
    """Requested status change is not in the allowed transition map."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, entry_id: str, from_status: str, to_status: str):
        self.entry_id = entry_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot transition entry {entry_id} from {from_status} to {to_status}"
        )


class NotPostedError(StateError):
    """Only posted entries can be reversed."""

    code: str = "ENTRY_NOT_POSTED"

    def __init__(self, entry_id: str, status: str):
        self.entry_id = entry_id
        self.status = status
        super().__init__(
            f"Entry {entry_id} cannot be reversed: status is {status}, not posted"
        )


class AlreadyReversedError(StateError):
    """Entry already carries a reversal link."""

    code: str = "ENTRY_ALREADY_REVERSED"

    def __init__(self, entry_id: str, reversed_by_entry_id: str):
        self.entry_id = entry_id
        self.reversed_by_entry_id = reversed_by_entry_id
        super().__init__(
            f"Entry {entry_id} has already been reversed by {reversed_by_entry_id}"
        )


# Ledger lookup errors


class LedgerError(BackofficeError):
    """Base exception for ledger lookup and loading errors."""

    code: str = "LEDGER_ERROR"


class EntryNotFoundError(LedgerError):
    """Journal entry with given ID was not found."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}")


class DuplicateJournalNumberError(LedgerError):
    """Two entries share a journal number."""

    code: str = "DUPLICATE_JOURNAL_NUMBER"

    def __init__(self, journal_number: str):
        self.journal_number = journal_number
        super().__init__(f"Duplicate journal number: {journal_number}")


# Account errors


class AccountError(BackofficeError):
    """Base exception for chart-of-accounts errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Account with given ID was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class AccountInactiveError(AccountError):
    """Account is inactive and cannot receive new lines."""

    code: str = "ACCOUNT_INACTIVE"

    def __init__(self, account_id: str, account_code: str):
        self.account_id = account_id
        self.account_code = account_code
        super().__init__(f"Account {account_code} ({account_id}) is inactive")


class DuplicateAccountError(AccountError):
    """Account ID or code is already registered."""

    code: str = "DUPLICATE_ACCOUNT"

    def __init__(self, account_id: str, account_code: str):
        self.account_id = account_id
        self.account_code = account_code
        super().__init__(
            f"Account {account_code} ({account_id}) is already registered"
        )


# Period errors


class PeriodError(BackofficeError):
    """Base exception for reporting-period errors."""

    code: str = "PERIOD_ERROR"


class InvalidPeriodError(PeriodError):
    """Reporting period could not be resolved."""

    code: str = "INVALID_PERIOD"

    def __init__(self, token: str, reason: str):
        self.token = token
        self.reason = reason
        super().__init__(f"Cannot resolve period '{token}': {reason}")


# Configuration


class ConfigurationError(BackofficeError):
    """Configuration document is malformed."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, section: str, reason: str):
        self.section = section
        self.reason = reason
        super().__init__(f"Invalid configuration section '{section}': {reason}")


# Persistence


class PersistenceError(BackofficeError):
    """Base exception for the relational store adapter."""

    code: str = "PERSISTENCE_ERROR"


class ImmutabilityViolationError(PersistenceError):
    """Attempted to update or delete an immutable stored record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )
