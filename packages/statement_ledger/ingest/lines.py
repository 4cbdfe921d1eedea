"""Line splitting, CSV field tokenizing and amount parsing shared by adapters.

Tokenizing uses the stdlib :mod:`csv` reader on one line at a time, so
quoting follows RFC 4180: commas inside double-quoted spans do not split, a
doubled quote inside a quoted span is a literal quote, and empty fields are
preserved.
"""

from __future__ import annotations

import csv
import re
from decimal import Decimal, InvalidOperation

_CURRENCY_SYMBOLS = "$€£¥"


def split_lines(text: str) -> list[str]:
    """Return the trimmed, non-blank lines of ``text`` (BOM and CRLF tolerant)."""

    if text.startswith("\ufeff"):
        text = text[1:]
    return [s for s in (line.strip() for line in text.splitlines()) if s]


def tokenize_line(line: str) -> list[str]:
    """Split one CSV line into its fields."""

    try:
        rows = list(csv.reader([line]))
    except csv.Error:
        # Unbalanced quoting; hand back the raw line as a single field so the
        # row falls out of the adapters' column checks.
        return [line]
    if not rows or not rows[0]:
        return [""]
    return rows[0]


def parse_amount(raw: str | None) -> Decimal | None:
    """Parse a money string into a signed ``Decimal``.

    Accepts a leading ``+``/``-``, currency symbols, thousands separators and
    accounting parentheses (``"(12.50)"`` is negative) in any order. Returns
    ``None`` for empty, non-numeric or non-finite input.
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    negative = False
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = not negative
            s = s[1:].lstrip()
            changed = True
        if s and s[0] in _CURRENCY_SYMBOLS:
            s = s[1:].lstrip()
            changed = True
        if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break
    s = s.replace(",", "")
    if s and s[-1] in _CURRENCY_SYMBOLS:
        s = s[:-1].rstrip()
    try:
        value = Decimal(s)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return -abs(value) if negative else value


# A bare money token: optional sign, optional "$", digits with separators and
# up to two decimals. Used to find the amount column in header-less exports.
AMOUNT_TOKEN_RE = re.compile(r"^-?\$?[\d,]+\.?\d{0,2}$")


__all__ = ["split_lines", "tokenize_line", "parse_amount", "AMOUNT_TOKEN_RE"]
