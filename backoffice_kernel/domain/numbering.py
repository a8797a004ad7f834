"""Sequential journal numbering ("JE-000001", "JE-000002", ...)."""

from __future__ import annotations

import re
from collections.abc import Iterable


class JournalNumberGenerator:
    """
    Monotonic journal number source.

    Numbers are never reused.  ``observe`` lets the ledger seed the sequence
    past numbers loaded from the host store, so a restart cannot collide
    with an existing entry.
    """

    def __init__(self, prefix: str = "JE", width: int = 6, start: int = 1):
        self._prefix = prefix
        self._width = width
        self._next = start
        self._pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")

    def next(self) -> str:
        number = f"{self._prefix}-{self._next:0{self._width}d}"
        self._next += 1
        return number

    def observe(self, numbers: Iterable[str]) -> None:
        """Advance past any matching number already in use."""
        for number in numbers:
            match = self._pattern.match(number)
            if match:
                self._next = max(self._next, int(match.group(1)) + 1)

    @property
    def peek(self) -> str:
        return f"{self._prefix}-{self._next:0{self._width}d}"
