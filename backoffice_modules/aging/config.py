"""
Aging Configuration Schema.

Bucket boundaries, the document statuses that take an invoice out of the
aging population, and the placeholder names for missing counterparties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Self

from backoffice_engines.aging import HOTEL_BUCKETS, AgeBucket
from backoffice_kernel.logging_config import get_logger

logger = get_logger("modules.aging.config")


@dataclass
class AgingConfig:
    """
    Configuration schema for AP/AR aging.

    The same bucket sequence is used for payables and receivables; each
    sequence must start with a bucket at min_days 0 and end unbounded.
    """

    buckets: tuple[AgeBucket, ...] = HOTEL_BUCKETS

    ap_excluded_statuses: tuple[str, ...] = ("posted", "cancelled", "rejected")
    ar_excluded_statuses: tuple[str, ...] = ("posted", "cancelled", "refunded")

    unknown_supplier_name: str = "Unknown Supplier"
    unknown_guest_name: str = "Unknown Guest"

    # derived in __post_init__ from the last bucket
    high_risk_bucket: str = field(init=False, default="")

    def __post_init__(self):
        if not self.buckets:
            raise ValueError("at least one aging bucket is required")
        if self.buckets[0].min_days != 0:
            raise ValueError("first aging bucket must start at 0 days")
        if not self.buckets[-1].is_unbounded:
            raise ValueError("last aging bucket must be unbounded")
        for previous, current in zip(self.buckets, self.buckets[1:]):
            if previous.max_days is None or current.min_days != previous.max_days + 1:
                raise ValueError(
                    f"aging buckets must be contiguous: {previous.name} -> {current.name}"
                )
        self.high_risk_bucket = self.buckets[-1].name

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("aging_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """
        Create config from dictionary.

        ``buckets`` is a list of ``{name, min_days, max_days}`` mappings;
        ``max_days`` may be omitted or null for the last bucket.
        """
        data = dict(data)
        if "buckets" in data:
            data["buckets"] = tuple(
                AgeBucket(b["name"], int(b["min_days"]), b.get("max_days"))
                for b in data["buckets"]
            )
        for key in ("ap_excluded_statuses", "ar_excluded_statuses"):
            if key in data:
                data[key] = tuple(data[key])
        logger.info(
            "aging_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
