"""
Module: backoffice_kernel.db.base
Responsibility: Declarative base for all SQLAlchemy ORM models.  Provides the
    string primary key convention and the type annotation map for consistent
    column types.
Architecture position: Kernel > DB.  Lowest-level import target within the
    persistence adapter.  MUST NOT import from models/ or services/.

Invariants enforced:
    - Decimal precision: type_annotation_map maps Python Decimal to
      Numeric(38, 9).  NEVER use float for monetary amounts.
    - Timestamps are stored timezone-aware where the backend supports it.

Failure modes:
    - IntegrityError on duplicate primary keys.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import Date, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all back-office ORM models.

    Guarantees:
        - id is a host-supplied string (UUID text by default) of at most 64
          characters.
        - Decimal maps to Numeric(38, 9) -- financial-grade precision.
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        # Financial precision: 38 digits total, 9 decimal places
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date,
        str: String(255),
    }

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
