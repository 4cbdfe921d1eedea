"""Data models for ``statement_ledger``.

``RawRecord`` is the intermediate row a format parser emits; it is never
persisted. ``Transaction`` is the ledger entity handed to collaborators (UI,
storage, exporters) and is a Pydantic model so it round-trips through JSON
with the camelCase field names those collaborators expect
(``isSubscription``, ``subscriptionFrequency``).

The remaining dataclasses are transient views computed on demand from a
transaction snapshot.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Direction(StrEnum):
    """Money flow of a transaction: spending (debit) or money received (credit)."""

    DEBIT = "debit"
    CREDIT = "credit"


class Frequency(StrEnum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


type IdFactory = Callable[[], str]
"""Zero-argument callable returning a fresh opaque transaction identifier."""

type IdentityKey = tuple[date, Decimal, str]
"""``(date, amount, description)``: the deduplication identity of a record."""


@dataclass(frozen=True, slots=True)
class RawRecord:
    """A parsed CSV row before enrichment.

    ``amount`` is always the absolute magnitude; ``direction`` carries the
    sign information as interpreted by the producing parser.
    """

    date: dt.date
    amount: Decimal
    description: str
    direction: Direction


class Transaction(BaseModel):
    """A single ledger transaction.

    ``is_subscription`` may only be true for debits; credits (payments
    received) are never recurring charges.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: str
    date: dt.date
    description: str
    amount: Decimal
    vendor: str
    category: str
    direction: Direction
    is_subscription: bool = False
    subscription_frequency: Frequency | None = None

    @field_validator("amount")
    @classmethod
    def _amount_is_magnitude(cls, v: Decimal) -> Decimal:
        if not v.is_finite() or v < 0:
            raise ValueError("amount must be a finite, non-negative magnitude")
        return v

    @model_validator(mode="after")
    def _credits_are_never_subscriptions(self) -> Transaction:
        if self.is_subscription and self.direction is not Direction.DEBIT:
            raise ValueError("only debit transactions can be flagged as subscriptions")
        return self

    @property
    def identity(self) -> IdentityKey:
        return (self.date, self.amount, self.description)


@dataclass(frozen=True, slots=True)
class VendorVariantGroup:
    """Spellings of one merchant that normalize to the same grouping key.

    ``variants`` lists the distinct original vendor strings in first-seen
    order; ``transaction_count`` counts every transaction carrying any of them.
    """

    normalized_name: str
    variants: tuple[str, ...]
    transaction_count: int


@dataclass(frozen=True, slots=True)
class MergedVendorGroup:
    canonical: str
    variants: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MergeResult:
    transactions: list[Transaction]
    merged_groups: list[MergedVendorGroup]


@dataclass(frozen=True, slots=True)
class SubscriptionSummary:
    """One recurring charge as a dashboard lists it (grouped by vendor)."""

    name: str
    amount: Decimal
    frequency: str
    last_charge: date
    charge_count: int
    transaction_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class VendorTotal:
    name: str
    total: Decimal
    count: int


@dataclass(frozen=True, slots=True)
class SpendingSummary:
    total_spent: Decimal
    average_monthly: Decimal
    active_months: int
    subscription_total: Decimal
    debit_count: int


@dataclass(frozen=True, slots=True)
class MonthlyTotal:
    """Debit spending for one calendar month, ``month`` as ``YYYY-MM``."""

    month: str
    total: Decimal
    subscriptions: Decimal
    other: Decimal


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    name: str
    total: Decimal
    percent: Decimal


__all__ = [
    "Direction",
    "Frequency",
    "IdFactory",
    "IdentityKey",
    "RawRecord",
    "Transaction",
    "VendorVariantGroup",
    "MergedVendorGroup",
    "MergeResult",
    "SubscriptionSummary",
    "VendorTotal",
    "SpendingSummary",
    "MonthlyTotal",
    "CategoryTotal",
]
