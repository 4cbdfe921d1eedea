"""Vendor and category enrichment of parsed rows.

Turns :class:`RawRecord` rows into ledger :class:`Transaction` objects:

- ``vendor``: a display name cut out of the raw description by an ordered
  rule pipeline (see :func:`vendor_rules`).
- ``category``: a learned vendor→category override when one exists for the
  extracted vendor, else the first keyword-table category whose keywords
  occur in the description, else the configured default (``"Other"``).

Subscription status is never decided here; it is computed later over the
combined transaction set.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable, Mapping, Sequence

from .config import LedgerConfig, default_config
from .logging_setup import get_logger
from .models import IdFactory, RawRecord, Transaction
from .text_rules import TextRule, alternation, apply_rules, regex_rule, strip_rule

_logger = get_logger(__name__)

_SEGMENT_SPLIT_RE = re.compile(r"\s{2,}|/|\\|-")

# Alphanumeric run that contains at least one digit and one letter.
_MIXED_TOKEN = r"(?=[a-z]*\d)(?=\d*[a-z])[a-z0-9]{%s}\b"


def default_id_factory() -> str:
    return str(uuid.uuid4())


def vendor_rules(config: LedgerConfig) -> list[TextRule]:
    """The vendor cleanup pipeline, in application order."""

    lo, hi = config.noise_token_min_length, config.noise_token_max_length
    return [
        regex_rule(rf"^(?:{alternation(config.vendor_prefixes)})\s", flags=re.IGNORECASE),
        regex_rule(r"\d{4,}"),
        regex_rule(r"[#*]"),
        strip_rule,
        # Confirmation-code noise such as "K94zgm" or "6eavyqwv9r".
        regex_rule(r"\s+" + _MIXED_TOKEN % f"{lo},{hi}", flags=re.IGNORECASE),
        regex_rule(r"\s+" + _MIXED_TOKEN % f"{hi + 1},", flags=re.IGNORECASE),
    ]


def _first_segment(text: str) -> str:
    return _SEGMENT_SPLIT_RE.split(text, maxsplit=1)[0].strip()


def _title_words(text: str) -> str:
    return " ".join(word.capitalize() for word in text.split(" "))


def extract_vendor(
    description: str,
    *,
    config: LedgerConfig | None = None,
    rules: Sequence[TextRule] | None = None,
) -> str:
    """Derive a display vendor name from a raw transaction description.

    >>> extract_vendor("POS NETFLIX.COM 866-579-7172")
    'Netflix.com 866'
    """

    cfg = config or default_config()
    cleaned = apply_rules(description, rules if rules is not None else vendor_rules(cfg))
    vendor = _first_segment(cleaned) or description
    return _title_words(vendor)[: cfg.vendor_max_length]


def detect_category(
    description: str,
    overrides: Mapping[str, str] | None = None,
    *,
    config: LedgerConfig | None = None,
    vendor: str | None = None,
) -> str:
    """Return the category for ``description``.

    ``overrides`` maps extracted vendor names to categories and takes
    precedence over the keyword table. ``vendor`` may be passed when the
    caller already extracted it.
    """

    cfg = config or default_config()
    if overrides:
        key = vendor if vendor is not None else extract_vendor(description, config=cfg)
        if key in overrides:
            return overrides[key]

    lower = description.lower()
    for category, keywords in cfg.category_keywords.items():
        if any(k.lower() in lower for k in keywords):
            return category
    return cfg.default_category


def enrich(
    records: Iterable[RawRecord],
    overrides: Mapping[str, str] | None = None,
    *,
    config: LedgerConfig | None = None,
    id_factory: IdFactory | None = None,
) -> list[Transaction]:
    """Build ledger transactions from parsed rows (``is_subscription=False``)."""

    cfg = config or default_config()
    new_id = id_factory or default_id_factory
    rules = vendor_rules(cfg)

    out: list[Transaction] = []
    for rec in records:
        vendor = extract_vendor(rec.description, config=cfg, rules=rules)
        out.append(
            Transaction(
                id=new_id(),
                date=rec.date,
                description=rec.description,
                amount=rec.amount,
                vendor=vendor,
                category=detect_category(rec.description, overrides, config=cfg, vendor=vendor),
                direction=rec.direction,
                is_subscription=False,
            )
        )
    _logger.debug("enrich: %d transactions (overrides=%d)", len(out), len(overrides or {}))
    return out


__all__ = [
    "default_id_factory",
    "vendor_rules",
    "extract_vendor",
    "detect_category",
    "enrich",
]
