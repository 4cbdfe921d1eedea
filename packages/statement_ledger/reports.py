"""Read-only aggregates over a transaction snapshot, plus the plain-data edits.

Dashboards summarize the ledger by vendor, category and month; these helpers are
the computations behind those views. All of them count debits only, since
credits are money received rather than spending.

``apply_vendor_category`` and ``set_subscription`` are the two user edits the
surrounding application applies to the transaction array. They return new
transaction objects and leave the input untouched.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from .models import (
    CategoryTotal,
    Direction,
    Frequency,
    MonthlyTotal,
    SpendingSummary,
    SubscriptionSummary,
    Transaction,
    VendorTotal,
)

ONE_TIME = "one-time"
_CENTS = Decimal("0.01")


def _debits(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.direction is Direction.DEBIT]


def _group_by_vendor(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    by_vendor: dict[str, list[Transaction]] = {}
    for tx in transactions:
        by_vendor.setdefault(tx.vendor, []).append(tx)
    return by_vendor


def summarize_subscriptions(transactions: Iterable[Transaction]) -> list[SubscriptionSummary]:
    """One summary per vendor with flagged subscription debits, priciest first.

    ``amount`` is the mean charge rounded to cents. ``frequency`` comes from
    the vendor's first flagged transaction; when that carries none, a vendor
    with several charges is reported as monthly and a single charge as
    ``"one-time"``.
    """

    flagged = [t for t in _debits(transactions) if t.is_subscription]
    out: list[SubscriptionSummary] = []
    for vendor, members in _group_by_vendor(flagged).items():
        total = sum((t.amount for t in members), Decimal(0))
        first = members[0].subscription_frequency
        if first is not None:
            frequency = first.value
        else:
            frequency = Frequency.MONTHLY.value if len(members) > 1 else ONE_TIME
        out.append(
            SubscriptionSummary(
                name=vendor,
                amount=(total / len(members)).quantize(_CENTS, rounding=ROUND_HALF_UP),
                frequency=frequency,
                last_charge=max(t.date for t in members),
                charge_count=len(members),
                transaction_ids=tuple(t.id for t in members),
            )
        )
    out.sort(key=lambda s: s.amount, reverse=True)
    return out


def monthly_subscription_total(summaries: Iterable[SubscriptionSummary]) -> Decimal:
    """Sum of the monthly subscriptions' average charges."""

    return sum(
        (s.amount for s in summaries if s.frequency == Frequency.MONTHLY.value), Decimal(0)
    )


def vendor_totals(transactions: Iterable[Transaction]) -> list[VendorTotal]:
    totals = [
        VendorTotal(
            name=vendor,
            total=sum((t.amount for t in members), Decimal(0)),
            count=len(members),
        )
        for vendor, members in _group_by_vendor(_debits(transactions)).items()
    ]
    totals.sort(key=lambda v: v.total, reverse=True)
    return totals


def spending_summary(transactions: Iterable[Transaction]) -> SpendingSummary:
    """Headline numbers: total spent, per-active-month average, subscriptions.

    A month is active when it holds at least one debit; the average divides
    by at least one month so an empty ledger reports zeros.
    """

    debits = _debits(transactions)
    total = sum((t.amount for t in debits), Decimal(0))
    months = {(t.date.year, t.date.month) for t in debits}
    subscription_total = sum((t.amount for t in debits if t.is_subscription), Decimal(0))
    return SpendingSummary(
        total_spent=total,
        average_monthly=(total / max(len(months), 1)).quantize(_CENTS, rounding=ROUND_HALF_UP),
        active_months=len(months),
        subscription_total=subscription_total,
        debit_count=len(debits),
    )


def monthly_breakdown(
    transactions: Iterable[Transaction],
    *,
    category: str | None = None,
    months: int = 12,
) -> list[MonthlyTotal]:
    """Debit totals per calendar month, oldest first, for the latest ``months``.

    Only months holding at least one debit appear. ``category`` restricts the
    debits counted; ``other`` is whatever is not flagged as a subscription.
    """

    if months < 1:
        raise ValueError("months must be at least 1")

    debits = _debits(transactions)
    if category is not None:
        debits = [t for t in debits if t.category == category]

    by_month: dict[str, list[Transaction]] = {}
    for tx in debits:
        by_month.setdefault(f"{tx.date.year:04d}-{tx.date.month:02d}", []).append(tx)

    out: list[MonthlyTotal] = []
    for month in sorted(by_month)[-months:]:
        members = by_month[month]
        total = sum((t.amount for t in members), Decimal(0))
        subscriptions = sum((t.amount for t in members if t.is_subscription), Decimal(0))
        out.append(
            MonthlyTotal(
                month=month,
                total=total,
                subscriptions=subscriptions,
                other=total - subscriptions,
            )
        )
    return out


def category_totals(transactions: Iterable[Transaction]) -> list[CategoryTotal]:
    """Debit totals per category with their share of all spending, largest first."""

    by_category: dict[str, Decimal] = {}
    for tx in _debits(transactions):
        by_category[tx.category] = by_category.get(tx.category, Decimal(0)) + tx.amount

    grand = sum(by_category.values(), Decimal(0))
    totals = [
        CategoryTotal(
            name=name,
            total=total,
            percent=(total * 100 / grand).quantize(_CENTS, rounding=ROUND_HALF_UP)
            if grand
            else Decimal(0),
        )
        for name, total in by_category.items()
    ]
    totals.sort(key=lambda c: c.total, reverse=True)
    return totals


def apply_vendor_category(
    transactions: Sequence[Transaction], vendor: str, category: str
) -> list[Transaction]:
    """Set ``category`` on every transaction whose vendor is ``vendor``."""

    return [
        tx.model_copy(update={"category": category}) if tx.vendor == vendor else tx
        for tx in transactions
    ]


def set_subscription(
    transactions: Sequence[Transaction],
    ids: Collection[str],
    flag: bool,
    frequency: Frequency | None = None,
) -> list[Transaction]:
    """Manually toggle the subscription flag for the transactions in ``ids``.

    Credits are left unflagged even when listed. Clearing the flag also
    clears the frequency.
    """

    wanted = set(ids)
    out: list[Transaction] = []
    for tx in transactions:
        if tx.id not in wanted or (flag and tx.direction is not Direction.DEBIT):
            out.append(tx)
            continue
        out.append(
            tx.model_copy(
                update={
                    "is_subscription": flag,
                    "subscription_frequency": frequency if flag else None,
                }
            )
        )
    return out


__all__ = [
    "ONE_TIME",
    "summarize_subscriptions",
    "monthly_subscription_total",
    "vendor_totals",
    "spending_summary",
    "monthly_breakdown",
    "category_totals",
    "apply_vendor_category",
    "set_subscription",
]
