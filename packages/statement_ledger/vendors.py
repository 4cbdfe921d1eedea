"""Vendor variant detection and merging.

Card statements spell one merchant many ways: ``"Tom Sushi #50929 BC"`` and
``"Tom Sushi #50788 BC"`` are the same restaurant at two locations. Vendors
that share a grouping form (lowercased, store numbers and trailing region or
direction codes removed, whitespace collapsed) are reported as variants and
can be collapsed onto one canonical spelling.

Merging is idempotent: after a merge each group has a single spelling left,
so a second pass finds nothing to do.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from .config import LedgerConfig, default_config
from .logging_setup import get_logger
from .models import MergedVendorGroup, MergeResult, Transaction, VendorVariantGroup
from .text_rules import TextRule, apply_rules, collapse_whitespace_rule, lower_rule, regex_rule

_logger = get_logger(__name__)

_DIRECTIONS = frozenset({"n", "s", "e", "w"})


def _trailing_code_rule(config: LedgerConfig) -> TextRule:
    codes = frozenset(config.region_codes) | _DIRECTIONS

    def _strip_trailing_codes(text: str) -> str:
        words = text.split()
        while len(words) > 1 and words[-1] in codes:
            words.pop()
        return " ".join(words)

    return _strip_trailing_codes


def grouping_rules(config: LedgerConfig) -> list[TextRule]:
    return [
        lower_rule,
        regex_rule(r"#\s*\d{1,6}\b"),
        collapse_whitespace_rule,
        _trailing_code_rule(config),
        collapse_whitespace_rule,
    ]


def normalize_vendor(name: str, *, config: LedgerConfig | None = None) -> str:
    """Return the grouping form of a vendor name.

    >>> normalize_vendor("SHOPPERS DRUG MART #222 BC")
    'shoppers drug mart'
    """

    return apply_rules(name, grouping_rules(config or default_config()))


def _group(
    transactions: Iterable[Transaction], config: LedgerConfig
) -> dict[str, Counter[str]]:
    rules = grouping_rules(config)
    by_key: dict[str, Counter[str]] = {}
    for tx in transactions:
        key = apply_rules(tx.vendor, rules)
        if not key:
            continue
        by_key.setdefault(key, Counter())[tx.vendor] += 1
    return by_key


def find_vendor_variants(
    transactions: Iterable[Transaction], *, config: LedgerConfig | None = None
) -> list[VendorVariantGroup]:
    """Groups with at least two distinct spellings, most transactions first."""

    groups = [
        VendorVariantGroup(
            normalized_name=key,
            variants=tuple(counts),
            transaction_count=sum(counts.values()),
        )
        for key, counts in _group(transactions, config or default_config()).items()
        if len(counts) >= 2
    ]
    groups.sort(key=lambda g: g.transaction_count, reverse=True)
    return groups


def pick_canonical(counts: Counter[str]) -> str:
    """Most frequent spelling; ties go to the shortest, then the first seen."""

    order = {name: i for i, name in enumerate(counts)}
    return min(counts, key=lambda name: (-counts[name], len(name), order[name]))


def auto_merge_vendors(
    transactions: Sequence[Transaction],
    min_variants: int = 2,
    *,
    config: LedgerConfig | None = None,
) -> MergeResult:
    """Rewrite each variant group's vendors to its canonical spelling.

    Returns new transaction objects (input order preserved) together with the
    merges performed, for audit or display.
    """

    if min_variants < 2:
        raise ValueError("min_variants must be at least 2")

    rename: dict[str, str] = {}
    merged: list[MergedVendorGroup] = []
    for counts in _group(transactions, config or default_config()).values():
        if len(counts) < min_variants:
            continue
        canonical = pick_canonical(counts)
        merged.append(MergedVendorGroup(canonical=canonical, variants=tuple(counts)))
        for name in counts:
            if name != canonical:
                rename[name] = canonical

    out = [
        tx.model_copy(update={"vendor": rename[tx.vendor]}) if tx.vendor in rename else tx
        for tx in transactions
    ]
    if merged:
        _logger.debug(
            "vendors: merged %d groups (%d spellings rewritten)", len(merged), len(rename)
        )
    return MergeResult(transactions=out, merged_groups=merged)


__all__ = [
    "grouping_rules",
    "normalize_vendor",
    "find_vendor_variants",
    "pick_canonical",
    "auto_merge_vendors",
]
