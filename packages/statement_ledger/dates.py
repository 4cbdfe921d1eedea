"""Date recognition for statement exports.

Notations are tried in a fixed priority order and the first one that yields a
real calendar date wins:

1. ISO ``YYYY-MM-DD`` (anything may follow, e.g. a time component)
2. month-first ``MM/DD/YYYY`` or ``MM/DD/YY`` (``YY`` → ``20YY``)
3. day-first ``DD/MM/YYYY``
4. spelled month ``DD Mon[.] YYYY`` (case-insensitive, ``"4 Mar. 2025"``)

ISO goes first so ``2024-01-05`` is never read as day-first. A notation that
matches but names an impossible date (``02/30/2025``) falls through to the
next notation, which is how ``25/12/2025`` reaches the day-first reading.
Results are naive calendar dates; no timezone conversion happens.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import date

from .config import LedgerConfig, default_config

type _Builder = Callable[[re.Match[str], Mapping[str, int]], tuple[int, int, int] | None]


def _iso(m: re.Match[str], _months: Mapping[str, int]) -> tuple[int, int, int]:
    return int(m[1]), int(m[2]), int(m[3])


def _month_first(m: re.Match[str], _months: Mapping[str, int]) -> tuple[int, int, int]:
    year = int(m[3])
    if year < 100:
        year += 2000
    return year, int(m[1]), int(m[2])


def _day_first(m: re.Match[str], _months: Mapping[str, int]) -> tuple[int, int, int]:
    return int(m[3]), int(m[2]), int(m[1])


def _spelled(m: re.Match[str], months: Mapping[str, int]) -> tuple[int, int, int] | None:
    month = months.get(m[2].lower())
    if month is None:
        return None
    return int(m[3]), month, int(m[1])


_NOTATIONS: tuple[tuple[str, re.Pattern[str], _Builder], ...] = (
    ("iso", re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)"), _iso),
    ("month_first", re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?!\d)"), _month_first),
    ("day_first", re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})(?!\d)"), _day_first),
    ("spelled", re.compile(r"(\d{1,2})\s+([A-Za-z]{3,9})\.?\s+(\d{4})(?!\d)"), _spelled),
)


def _parse(text: str | None, config: LedgerConfig | None, *, whole: bool) -> date | None:
    if text is None:
        return None
    s = text.strip()
    if not s:
        return None
    months = (config or default_config()).month_names
    for _name, pattern, build in _NOTATIONS:
        m = pattern.fullmatch(s) if whole else pattern.match(s)
        if m is None:
            continue
        parts = build(m, months)
        if parts is None:
            continue
        try:
            return date(*parts)
        except ValueError:
            continue
    return None


def parse_date(text: str | None, *, config: LedgerConfig | None = None) -> date | None:
    """Return the calendar date at the start of ``text`` or ``None`` (no match).

    Trailing content after a recognized date is ignored, so ISO timestamps
    and ``"03/04/2025 10:15"`` both parse.
    """

    return _parse(text, config, whole=False)


def is_date_string(text: str | None, *, config: LedgerConfig | None = None) -> bool:
    """True when ``text`` consists of nothing but a recognizable date.

    Parsers use this to reject rows whose description column holds a date,
    the usual symptom of column misalignment.
    """

    return _parse(text, config, whole=True) is not None


__all__ = ["parse_date", "is_date_string"]
