"""Row acceptance rules shared by every format adapter.

A candidate row becomes a :class:`RawRecord` only when its date parses, its
amount is a finite non-zero number, and its description is at least two
characters long and is not itself a date (a sign that columns slipped).
Rejected rows are dropped silently; adapters only count them for debug logs.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from ..config import LedgerConfig
from ..dates import is_date_string, parse_date
from ..models import Direction, RawRecord

MIN_DESCRIPTION_LENGTH = 2

type DirectionRule = Callable[[Decimal], Direction]


def positive_is_debit(amount: Decimal) -> Direction:
    """Charge-card statements list charges as positive amounts."""

    return Direction.DEBIT if amount > 0 else Direction.CREDIT


def negative_is_debit(amount: Decimal) -> Direction:
    """Bank ledgers list spending as negative amounts."""

    return Direction.DEBIT if amount < 0 else Direction.CREDIT


def accept_row(
    date_text: str | None,
    amount: Decimal | None,
    description: str | None,
    direction: Direction | DirectionRule,
    *,
    config: LedgerConfig,
) -> RawRecord | None:
    """Apply the shared rejection rules and build a record, or return ``None``.

    ``direction`` is either a fixed :class:`Direction` (columnar debit/credit
    exports) or a rule mapping the signed amount to a direction.
    """

    when = parse_date(date_text, config=config)
    if when is None:
        return None
    if amount is None or amount == 0:
        return None
    desc = (description or "").strip()
    if len(desc) < MIN_DESCRIPTION_LENGTH or is_date_string(desc, config=config):
        return None
    resolved = direction if isinstance(direction, Direction) else direction(amount)
    return RawRecord(date=when, amount=abs(amount), description=desc, direction=resolved)


__all__ = [
    "DirectionRule",
    "positive_is_debit",
    "negative_is_debit",
    "accept_row",
]
