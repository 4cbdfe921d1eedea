"""Adapter for the eight-column card export without a header row.

Column order (fixed)::

    Name, Card, Transaction Date, Posting Date, Description, Currency, Debit, Credit

The transaction date is preferred and the posting date used when it is
missing or unreadable. Exactly one of the debit/credit columns is filled per
row; whichever it is determines both the amount and the direction.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...config import LedgerConfig
from ...dates import parse_date
from ...logging_setup import get_logger
from ...models import Direction, RawRecord
from ..lines import parse_amount, tokenize_line
from ..rules import accept_row

_logger = get_logger(__name__)

COLUMN_COUNT = 8


def has_multi_column_layout(line: str) -> bool:
    return len(tokenize_line(line)) >= COLUMN_COUNT


def parse_multi_column(lines: Sequence[str], *, config: LedgerConfig) -> list[RawRecord]:
    out: list[RawRecord] = []
    for line in lines:
        fields = tokenize_line(line)
        if len(fields) < COLUMN_COUNT:
            continue
        _name, _card, txn_date, post_date, description, _currency, debit, credit = fields[
            :COLUMN_COUNT
        ]

        date_text = txn_date if parse_date(txn_date, config=config) else post_date
        if debit.strip():
            amount, direction = parse_amount(debit), Direction.DEBIT
        elif credit.strip():
            amount, direction = parse_amount(credit), Direction.CREDIT
        else:
            continue

        rec = accept_row(date_text, amount, description, direction, config=config)
        if rec is not None:
            out.append(rec)

    _logger.debug("multi-column adapter: accepted=%d of %d", len(out), len(lines))
    return out


__all__ = ["COLUMN_COUNT", "has_multi_column_layout", "parse_multi_column"]
