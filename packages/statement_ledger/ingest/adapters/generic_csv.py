"""Fallback adapter for simple ``date, description, amount`` style exports.

The first line counts as a header only when it mentions ``date``,
``amount`` or ``description``; column positions are then found by name and
default to ``date=0, description=1, amount=2``. Amounts may carry currency
symbols, thousands separators or accounting parentheses; negative amounts
are debits.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...config import LedgerConfig
from ...logging_setup import get_logger
from ...models import RawRecord
from ..lines import parse_amount, tokenize_line
from ..rules import MIN_DESCRIPTION_LENGTH, accept_row, negative_is_debit

_logger = get_logger(__name__)

_DEFAULT_COLUMNS = (0, 1, 2)
_DESCRIPTION_NAMES = ("description", "memo", "name")
_AMOUNT_NAMES = ("amount", "debit", "credit")


def looks_like_header(line: str) -> bool:
    lower = line.lower()
    return "date" in lower or "amount" in lower or "description" in lower


def _find(names: Sequence[str], needles: Sequence[str], default: int) -> int:
    for i, name in enumerate(names):
        if any(n in name for n in needles):
            return i
    return default


def _field(fields: Sequence[str], idx: int) -> str:
    return fields[idx] if 0 <= idx < len(fields) else ""


def parse_generic(lines: Sequence[str], *, config: LedgerConfig) -> list[RawRecord]:
    if not lines:
        return []

    date_idx, desc_idx, amount_idx = _DEFAULT_COLUMNS
    data = lines
    if looks_like_header(lines[0]):
        names = [c.strip().lower() for c in tokenize_line(lines[0])]
        date_idx = _find(names, ("date",), date_idx)
        desc_idx = _find(names, _DESCRIPTION_NAMES, desc_idx)
        amount_idx = _find(names, _AMOUNT_NAMES, amount_idx)
        data = lines[1:]

    out: list[RawRecord] = []
    for line in data:
        fields = tokenize_line(line)
        description = _field(fields, desc_idx)
        if len(description.strip()) < MIN_DESCRIPTION_LENGTH:
            description = _field(fields, date_idx + 1)
        rec = accept_row(
            _field(fields, date_idx),
            parse_amount(_field(fields, amount_idx)),
            description,
            negative_is_debit,
            config=config,
        )
        if rec is not None:
            out.append(rec)

    _logger.debug("generic adapter: accepted=%d of %d", len(out), len(data))
    return out


__all__ = ["looks_like_header", "parse_generic"]
