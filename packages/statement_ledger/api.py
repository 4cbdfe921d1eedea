"""Public API for the ``statement_ledger`` package.

The two core entry points are :func:`parse` (one CSV export in, ledger
transactions out) and :func:`detect_recurring` (subscription flags recomputed
over a combined set). The vendor-variant helpers live in
``statement_ledger.vendors`` and are re-exported here so callers have one
stable import surface.

:func:`parse_files` strings the pieces together for the common multi-file
case: each text is parsed independently (in parallel), the results are
deduplicated by ``(date, amount, description)`` and detection runs exactly
once over the union.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import partial

from .combine import combine_transactions
from .config import LedgerConfig, default_config, resolve_max_workers
from .enrich import enrich
from .ingest import parse_records
from .logging_setup import get_logger
from .models import IdFactory, Transaction
from .pmap import p_map
from .recurring import detect_recurring
from .vendors import auto_merge_vendors, find_vendor_variants, normalize_vendor

_logger = get_logger(__name__)


def parse(
    csv_text: str,
    overrides: Mapping[str, str] | None = None,
    *,
    config: LedgerConfig | None = None,
    id_factory: IdFactory | None = None,
) -> list[Transaction]:
    """Parse one CSV export into transactions, newest first.

    Parameters
    ----------
    csv_text:
        Full file contents. The layout is sniffed; blank input yields ``[]``.
    overrides:
        Optional learned ``vendor -> category`` mapping that takes precedence
        over the keyword table.
    config, id_factory:
        Substitute tables and identifier generation (tests pass a
        deterministic factory).

    Returns
    -------
    list[Transaction]
        Sorted by date descending (stable for same-day rows), every item with
        ``is_subscription=False``. Rows that cannot be read are dropped.
    """

    cfg = config or default_config()
    records = parse_records(csv_text, config=cfg)
    transactions = enrich(records, overrides, config=cfg, id_factory=id_factory)
    transactions.sort(key=lambda t: t.date, reverse=True)
    _logger.info("parse: %d transactions", len(transactions))
    return transactions


def parse_files(
    texts: Sequence[str],
    overrides: Mapping[str, str] | None = None,
    *,
    config: LedgerConfig | None = None,
    id_factory: IdFactory | None = None,
    concurrency: int | None = None,
) -> list[Transaction]:
    """Parse several exports, combine them and flag recurring charges once.

    ``concurrency`` defaults to :func:`~statement_ledger.config.resolve_max_workers`.
    Output is independent of the order of ``texts`` apart from which
    duplicate's ``id`` survives.
    """

    cfg = config or default_config()
    workers = resolve_max_workers(len(texts), concurrency)
    batches = p_map(
        texts,
        partial(parse, overrides=overrides, config=cfg, id_factory=id_factory),
        concurrency=workers,
    )
    combined = combine_transactions(batches)
    flagged = detect_recurring(combined, config=cfg)
    _logger.info(
        "parse_files: files=%d parsed=%d unique=%d subscriptions=%d",
        len(texts),
        sum(len(b) for b in batches),
        len(flagged),
        sum(1 for t in flagged if t.is_subscription),
    )
    return flagged


__all__ = [
    "parse",
    "parse_files",
    "detect_recurring",
    "normalize_vendor",
    "find_vendor_variants",
    "auto_merge_vendors",
    "combine_transactions",
]
