"""Combining transactions parsed from several files.

Two records with the same ``(date, amount, description)`` are the same
transaction no matter which export they came from; only the first survives.
The result is sorted (date descending, then description and amount) so the
combined ledger does not depend on the order files arrived in.
"""

from __future__ import annotations

from collections.abc import Iterable

from .logging_setup import get_logger
from .models import IdentityKey, Transaction

_logger = get_logger(__name__)


def dedupe_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Drop later transactions whose identity was already seen (order kept)."""

    seen: set[IdentityKey] = set()
    out: list[Transaction] = []
    for tx in transactions:
        if tx.identity in seen:
            continue
        seen.add(tx.identity)
        out.append(tx)
    return out


def combine_transactions(batches: Iterable[Iterable[Transaction]]) -> list[Transaction]:
    """Union of per-file batches, deduplicated and deterministically ordered."""

    merged = [tx for batch in batches for tx in batch]
    unique = dedupe_transactions(merged)
    unique.sort(key=lambda t: (t.description, t.amount))
    unique.sort(key=lambda t: t.date, reverse=True)
    if len(unique) != len(merged):
        _logger.debug("combine: dropped %d duplicate transactions", len(merged) - len(unique))
    return unique


__all__ = ["dedupe_transactions", "combine_transactions"]
