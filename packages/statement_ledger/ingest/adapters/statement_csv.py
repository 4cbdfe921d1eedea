"""Adapter for charge-card statement exports (AmEx style).

Typical layout, often preceded by a human-readable preamble::

    Date,Date Processed,Description,Amount,Foreign Amount
    21 Nov. 2025,22 Nov. 2025,NETFLIX.COM,$16.49,
    19 Nov. 2025,19 Nov. 2025,PAYMENT RECEIVED - THANK YOU,"-$5,736.71",

Contract
--------
- The header is the first line mentioning ``date``, ``description`` and
  ``amount`` (and not ``posted date``). Column indices resolve by name:
  ``date`` prefers an exact ``Date`` column, ``description`` and ``amount``
  match by substring, and an amount column mentioning ``foreign`` is skipped.
- Summary rows (``"Summary"``, ``"Last billed"``, ...) are skipped.
- Charges are positive: ``amount > 0`` is a debit, ``amount < 0`` a credit.
  This is the reverse of the bank-ledger adapters.
- Without a usable header every line is read header-less: field 0 is the
  date, the last field that looks like a bare money token is the amount, and
  the fields between them form the description.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...config import LedgerConfig
from ...logging_setup import get_logger
from ...models import RawRecord
from ..lines import AMOUNT_TOKEN_RE, parse_amount, tokenize_line
from ..rules import accept_row, positive_is_debit

_logger = get_logger(__name__)


def is_statement_header(line: str) -> bool:
    lower = line.lower()
    return (
        "date" in lower
        and "description" in lower
        and "amount" in lower
        and "posted date" not in lower
    )


def _resolve_columns(header: Sequence[str]) -> tuple[int, int, int] | None:
    names = [h.strip().lower() for h in header]

    date_idx = next((i for i, n in enumerate(names) if n == "date"), None)
    if date_idx is None:
        date_idx = next((i for i, n in enumerate(names) if "date" in n), None)
    desc_idx = next((i for i, n in enumerate(names) if "description" in n), None)
    amount_idx = next(
        (i for i, n in enumerate(names) if "amount" in n and "foreign" not in n), None
    )
    if date_idx is None or desc_idx is None or amount_idx is None:
        return None
    return date_idx, desc_idx, amount_idx


def _is_summary_row(description: str, config: LedgerConfig) -> bool:
    lower = description.lower()
    return any(marker in lower for marker in config.summary_markers)


def parse_statement(lines: Sequence[str], *, config: LedgerConfig) -> list[RawRecord]:
    """Parse a statement export, falling back to header-less reading."""

    header_at: int | None = None
    columns: tuple[int, int, int] | None = None
    for i, line in enumerate(lines):
        if is_statement_header(line):
            header_at = i
            columns = _resolve_columns(tokenize_line(line))
            break

    if header_at is None or columns is None:
        _logger.debug("statement adapter: no usable header; reading header-less")
        return parse_statement_headerless(lines, config=config)

    date_idx, desc_idx, amount_idx = columns
    needed = max(columns) + 1
    out: list[RawRecord] = []
    dropped = 0
    for line in lines[header_at + 1 :]:
        fields = tokenize_line(line)
        if len(fields) < needed:
            dropped += 1
            continue
        description = fields[desc_idx]
        if _is_summary_row(description, config):
            dropped += 1
            continue
        amount = parse_amount(fields[amount_idx])
        rec = accept_row(
            fields[date_idx], amount, description, positive_is_debit, config=config
        )
        if rec is None:
            dropped += 1
            continue
        out.append(rec)

    _logger.debug("statement adapter: accepted=%d dropped=%d", len(out), dropped)
    return out


def parse_statement_headerless(
    lines: Sequence[str], *, config: LedgerConfig
) -> list[RawRecord]:
    out: list[RawRecord] = []
    for line in lines:
        fields = tokenize_line(line)
        if len(fields) < 2:
            continue
        amount_at = next(
            (i for i in range(len(fields) - 1, 0, -1) if AMOUNT_TOKEN_RE.match(fields[i])),
            None,
        )
        if amount_at is None:
            continue
        description = " ".join(fields[1:amount_at]).strip()
        rec = accept_row(
            fields[0],
            parse_amount(fields[amount_at]),
            description,
            positive_is_debit,
            config=config,
        )
        if rec is not None:
            out.append(rec)

    _logger.debug("statement adapter (header-less): accepted=%d of %d", len(out), len(lines))
    return out


__all__ = ["is_statement_header", "parse_statement", "parse_statement_headerless"]
