"""Adapter for bank exports with a ``Posted Date,Payee,Address,Amount`` header.

Spending is negative (``amount < 0`` is a debit). The address column is
appended to the payee when it carries anything, since it often holds the
only distinguishing text for a merchant.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...config import LedgerConfig
from ...logging_setup import get_logger
from ...models import RawRecord
from ..lines import parse_amount, tokenize_line
from ..rules import accept_row, negative_is_debit

_logger = get_logger(__name__)


def is_payee_header(line: str) -> bool:
    lower = line.lower()
    return "posted date" in lower or "payee" in lower


def parse_payee(lines: Sequence[str], *, config: LedgerConfig) -> list[RawRecord]:
    out: list[RawRecord] = []
    for line in lines[1:]:
        fields = tokenize_line(line)
        if len(fields) < 4:
            continue
        date_text, payee, address, amount_text = fields[:4]
        description = payee.strip()
        if address.strip():
            description = f"{description} {address.strip()}".strip()
        rec = accept_row(
            date_text, parse_amount(amount_text), description, negative_is_debit, config=config
        )
        if rec is not None:
            out.append(rec)

    _logger.debug("payee adapter: accepted=%d of %d", len(out), max(len(lines) - 1, 0))
    return out


__all__ = ["is_payee_header", "parse_payee"]
