"""Format sniffing and dispatch.

Detection is an ordered table of ``(kind, predicate, parser)`` rules; the first
predicate that accepts the file wins and the generic adapter always matches
last. Keeping the order in one table makes the precedence auditable:

1. ``STATEMENT``: an issuer marker appears anywhere in the text, or some line
   is a ``date``/``description``/``amount`` header (without ``posted date``).
2. ``PAYEE``: the first line mentions ``posted date`` or ``payee``.
3. ``MULTI_COLUMN``: the first line has at least eight fields.
4. ``GENERIC``: everything else.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from ..config import LedgerConfig, default_config
from ..logging_setup import get_logger
from ..models import RawRecord
from .adapters.generic_csv import parse_generic
from .adapters.multi_column_csv import has_multi_column_layout, parse_multi_column
from .adapters.payee_csv import is_payee_header, parse_payee
from .adapters.statement_csv import is_statement_header, parse_statement
from .lines import split_lines

_logger = get_logger(__name__)


class FormatKind(StrEnum):
    STATEMENT = "statement"
    PAYEE = "payee"
    MULTI_COLUMN = "multi_column"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class Sniff:
    """What the predicates look at: lowercased full text and the content lines."""

    text_lower: str
    lines: Sequence[str]


type Predicate = Callable[[Sniff, LedgerConfig], bool]
type Parser = Callable[..., list[RawRecord]]


@dataclass(frozen=True, slots=True)
class FormatRule:
    kind: FormatKind
    matches: Predicate
    parse: Parser


def _is_statement(sniff: Sniff, config: LedgerConfig) -> bool:
    if any(marker in sniff.text_lower for marker in config.issuer_markers):
        return True
    return any(is_statement_header(line) for line in sniff.lines)


def _is_payee(sniff: Sniff, _config: LedgerConfig) -> bool:
    return is_payee_header(sniff.lines[0])


def _is_multi_column(sniff: Sniff, _config: LedgerConfig) -> bool:
    return has_multi_column_layout(sniff.lines[0])


def _always(_sniff: Sniff, _config: LedgerConfig) -> bool:
    return True


FORMAT_RULES: tuple[FormatRule, ...] = (
    FormatRule(FormatKind.STATEMENT, _is_statement, parse_statement),
    FormatRule(FormatKind.PAYEE, _is_payee, parse_payee),
    FormatRule(FormatKind.MULTI_COLUMN, _is_multi_column, parse_multi_column),
    FormatRule(FormatKind.GENERIC, _always, parse_generic),
)


def _select(text: str, lines: Sequence[str], config: LedgerConfig) -> FormatRule:
    sniff = Sniff(text_lower=text.lower(), lines=lines)
    for rule in FORMAT_RULES:
        if rule.matches(sniff, config):
            return rule
    raise AssertionError("the generic rule always matches")  # pragma: no cover


def detect_format(text: str, *, config: LedgerConfig | None = None) -> FormatKind | None:
    """Return the layout ``text`` would be parsed as, or ``None`` when it is blank."""

    lines = split_lines(text)
    if not lines:
        return None
    return _select(text, lines, config or default_config()).kind


def parse_records(text: str, *, config: LedgerConfig | None = None) -> list[RawRecord]:
    """Sniff ``text`` and run the matching adapter; blank input yields ``[]``."""

    cfg = config or default_config()
    lines = split_lines(text)
    if not lines:
        return []
    rule = _select(text, lines, cfg)
    records = rule.parse(lines, config=cfg)
    _logger.debug(
        "dispatch: format=%s lines=%d records=%d", rule.kind.value, len(lines), len(records)
    )
    return records


__all__ = ["FormatKind", "FormatRule", "FORMAT_RULES", "Sniff", "detect_format", "parse_records"]
