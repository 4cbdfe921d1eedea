"""Recurring-charge (subscription) detection over a combined ledger.

Only debits take part. Debits are grouped by a transient normalized key
(cleaned description words plus the amount rounded to a grouping
granularity) and each group must clear every gate to be flagged:

1. at least two members;
2. not all on the same calendar day;
3. a two-member group must be at least ``min_pair_interval_days`` apart and
   sit in the monthly or annual band;
4. amount variance ``(max - min) / mean`` within 20% for pairs; groups of
   three or more are never rejected on variance alone;
5. every member's day-of-month within ±1 of the modal day, with month-end
   days (29th+) and month-start days (1st/2nd) treated as adjacent.

The detector is a pure function: no I/O, no exceptions for odd data, and its
output depends only on the ``(date, amount, description)`` identities of the
input, so re-running it (or feeding files in another order) gives the same
flags.
"""

from __future__ import annotations

import re
import statistics
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal, localcontext

from .config import DetectorSettings, LedgerConfig, default_config
from .logging_setup import get_logger
from .models import Direction, Frequency, IdentityKey, Transaction
from .text_rules import (
    TextRule,
    alternation,
    apply_rules,
    collapse_whitespace_rule,
    lower_rule,
    regex_rule,
    strip_rule,
)

_logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Normalized grouping key
# ---------------------------------------------------------------------------


def key_rules(settings: DetectorSettings) -> list[TextRule]:
    """Description cleanup applied before taking the key words.

    Location suffixes are removed while the text still has its original
    casing, since they are recognized by being all-caps.
    """

    return [
        regex_rule(r"\s{2,}[A-Z]{4,}(?:\s+[A-Z]{4,})*\s*$"),
        strip_rule,
        regex_rule(
            rf"\s+(?:{alternation(settings.known_locations)})\s*$", flags=re.IGNORECASE
        ),
        strip_rule,
        regex_rule(r"\s+[A-Z]{4,}(?:\s+[A-Z]{4,})*\s*$"),
        strip_rule,
        lower_rule,
        collapse_whitespace_rule,
        regex_rule(r"^(?:purchase|debit|payment|transfer|ach|autopay|automatic|card)\s+"),
        regex_rule(r"\s+(?:purchase|debit|payment|transfer)$"),
        regex_rule(rf"\b\d{{{settings.long_number_length},}}\b"),
        # Reference codes: any token carrying a digit.
        regex_rule(r"\b[a-z]*[0-9]+[a-z0-9]*\b"),
        regex_rule(r"\*\d{4}"),
        regex_rule(r"\*[a-z]+"),
        regex_rule(r"\s+(?:online|authorized|pending|completed|processed)$"),
        regex_rule(r"\s+(?:subscr|subscription)$"),
        regex_rule(r"_", " "),
        collapse_whitespace_rule,
    ]


def round_to_granularity(amount: Decimal, granularity: Decimal) -> Decimal:
    """Round ``amount`` to the nearest multiple of ``granularity`` (half-even).

    Precision grows with the magnitude of the quotient, so very long amounts
    round instead of raising ``InvalidOperation``.
    """

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() - granularity.adjusted() + ctx.prec)
        steps = (amount / granularity).quantize(Decimal(1), rounding=ROUND_HALF_EVEN)
        return steps * granularity


def normalized_key(
    tx: Transaction,
    *,
    settings: DetectorSettings | None = None,
    rules: Sequence[TextRule] | None = None,
) -> str:
    """Return ``"<first meaningful words>|<rounded amount>"`` for grouping."""

    s = settings or default_config().detector
    cleaned = apply_rules(tx.description, rules if rules is not None else key_rules(s))
    words = [w for w in cleaned.split() if len(w) >= s.key_min_word_length]
    head = " ".join(words[: s.key_word_count])
    rounded = round_to_granularity(tx.amount, s.amount_granularity)
    return f"{head}|{rounded.normalize():f}"


# ---------------------------------------------------------------------------
# Gates (each takes a group sorted by date)
# ---------------------------------------------------------------------------


def spans_multiple_days(group: Sequence[Transaction]) -> bool:
    return len({t.date for t in group}) > 1


def _in_band(days: int, band: tuple[int, int]) -> bool:
    lo, hi = band
    return lo <= days <= hi


def passes_interval_gate(group: Sequence[Transaction], settings: DetectorSettings) -> bool:
    """Pairs must be clearly monthly or annual; larger groups pass."""

    if len(group) != 2:
        return True
    gap = abs((group[1].date - group[0].date).days)
    if gap < settings.min_pair_interval_days:
        return False
    return _in_band(gap, settings.monthly_band) or _in_band(gap, settings.annual_band)


def amount_variance(amounts: Sequence[Decimal]) -> Decimal:
    mean = sum(amounts, Decimal(0)) / len(amounts)
    if mean == 0:
        return Decimal(0)
    return (max(amounts) - min(amounts)) / mean


def passes_variance_gate(group: Sequence[Transaction], settings: DetectorSettings) -> bool:
    ceiling = (
        settings.pair_variance_ceiling if len(group) == 2 else settings.group_variance_ceiling
    )
    if amount_variance([t.amount for t in group]) <= Decimal(str(ceiling)):
        return True
    # Three or more periodic charges outweigh price drift.
    return len(group) >= 3


def modal_day(days: Sequence[int]) -> int:
    """Most frequent day-of-month; ties go to the day seen first."""

    return Counter(days).most_common(1)[0][0]


def _days_adjacent(day: int, mode: int, settings: DetectorSettings) -> bool:
    if abs(day - mode) <= settings.day_of_month_tolerance:
        return True
    if mode >= settings.month_end_day and day <= settings.month_start_day:
        return True
    return day >= settings.month_end_day and mode <= settings.month_start_day


def passes_day_alignment(group: Sequence[Transaction], settings: DetectorSettings) -> bool:
    if len(group) < 2:
        return False
    days = [t.date.day for t in group]
    mode = modal_day(days)
    return all(_days_adjacent(d, mode, settings) for d in days)


def classify_frequency(dates: Sequence[date], settings: DetectorSettings) -> Frequency:
    """Annual when the typical gap between consecutive charges is annual."""

    gaps = [abs((b - a).days) for a, b in zip(dates, dates[1:], strict=False)]
    if gaps and _in_band(statistics.median_low(gaps), settings.annual_band):
        return Frequency.ANNUAL
    return Frequency.MONTHLY


def _first_failed_gate(group: Sequence[Transaction], settings: DetectorSettings) -> str | None:
    if len(group) < 2:
        return "cardinality"
    if not spans_multiple_days(group):
        return "same_day"
    if not passes_interval_gate(group, settings):
        return "interval"
    if not passes_variance_gate(group, settings):
        return "variance"
    if not passes_day_alignment(group, settings):
        return "day_of_month"
    return None


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------


def find_recurring(
    transactions: Iterable[Transaction], *, config: LedgerConfig | None = None
) -> dict[IdentityKey, Frequency]:
    """Return the identities of recurring debits mapped to their frequency."""

    settings = (config or default_config()).detector
    rules = key_rules(settings)

    groups: dict[str, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        if tx.direction is Direction.DEBIT:
            groups[normalized_key(tx, settings=settings, rules=rules)].append(tx)

    flagged: dict[IdentityKey, Frequency] = {}
    rejected: Counter[str] = Counter()
    for members in groups.values():
        group = sorted(members, key=lambda t: (t.date, t.amount, t.description))
        failed = _first_failed_gate(group, settings)
        if failed is not None:
            rejected[failed] += 1
            continue
        freq = classify_frequency([t.date for t in group], settings)
        for tx in group:
            flagged[tx.identity] = freq

    _logger.debug(
        "recurring: groups=%d accepted_tx=%d rejected_by_gate=%s",
        len(groups),
        len(flagged),
        dict(rejected),
    )
    return flagged


def detect_recurring(
    transactions: Iterable[Transaction], *, config: LedgerConfig | None = None
) -> list[Transaction]:
    """Recompute ``is_subscription``/``subscription_frequency`` from scratch.

    Returns copies of the input transactions in input order; prior flags are
    discarded. Credits always come back unflagged.
    """

    items = list(transactions)
    flagged = find_recurring(items, config=config)
    out: list[Transaction] = []
    for tx in items:
        freq = flagged.get(tx.identity) if tx.direction is Direction.DEBIT else None
        out.append(
            tx.model_copy(
                update={"is_subscription": freq is not None, "subscription_frequency": freq}
            )
        )
    return out


__all__ = [
    "key_rules",
    "round_to_granularity",
    "normalized_key",
    "spans_multiple_days",
    "passes_interval_gate",
    "amount_variance",
    "passes_variance_gate",
    "modal_day",
    "passes_day_alignment",
    "classify_frequency",
    "find_recurring",
    "detect_recurring",
]
