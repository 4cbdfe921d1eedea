"""Static tables and tunables for parsing, enrichment and detection.

Everything that used to be a hardcoded constant (the category keyword table,
the month-name table, regex cutoff lengths, detector thresholds) lives on a
validated :class:`LedgerConfig`. Public functions accept ``config=`` so tests
and callers can substitute alternate tables; when omitted they use
:func:`default_config`.

``load_config(path)`` overlays a JSON document on the defaults. Nested
``detector`` keys are merged individually so a file can tune one threshold
without restating the rest.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from functools import lru_cache
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

CONFIG_PATH_ENV = "STATEMENT_LEDGER_CONFIG"
MAX_WORKERS_ENV = "STATEMENT_LEDGER_MAX_WORKERS"

_DEFAULT_CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Food & Dining": (
        "restaurant",
        "cafe",
        "coffee",
        "food",
        "eat",
        "dining",
        "uber eats",
        "doordash",
        "grubhub",
        "mcdonald",
        "starbucks",
        "chipotle",
    ),
    "Shopping": ("amazon", "walmart", "target", "ebay", "etsy", "shop", "store", "market"),
    "Transportation": ("uber", "lyft", "gas", "fuel", "parking", "transit", "metro", "bus"),
    "Entertainment": (
        "netflix",
        "spotify",
        "hulu",
        "disney",
        "movie",
        "theater",
        "concert",
        "game",
    ),
    "Utilities": (
        "electric",
        "water",
        "gas",
        "internet",
        "phone",
        "mobile",
        "verizon",
        "att",
        "comcast",
    ),
    "Health": ("pharmacy", "doctor", "hospital", "medical", "health", "cvs", "walgreens"),
    "Travel": ("hotel", "airline", "flight", "airbnb", "booking", "expedia"),
}

_DEFAULT_MONTH_NAMES: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "sept": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

# Canadian provinces/territories, US states, and country codes seen as
# trailing location tokens on card statements.
_DEFAULT_REGION_CODES: tuple[str, ...] = (
    "ab", "bc", "mb", "nb", "nl", "ns", "nt", "nu", "on", "pe", "qc", "sk", "yt",
    "al", "ak", "az", "ar", "ca", "co", "ct", "de", "dc", "fl", "ga", "hi", "id",
    "il", "in", "ia", "ks", "ky", "la", "me", "md", "ma", "mi", "mn", "ms", "mo",
    "mt", "ne", "nv", "nh", "nj", "nm", "ny", "nc", "nd", "oh", "ok", "or", "pa",
    "ri", "sc", "sd", "tn", "tx", "ut", "vt", "va", "wa", "wv", "wi", "wy",
    "usa", "us", "can",
)  # fmt: skip


class DetectorSettings(BaseModel):
    """Thresholds for the recurring-charge detector."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_pair_interval_days: int = 20
    monthly_band: tuple[int, int] = (20, 40)
    annual_band: tuple[int, int] = (350, 380)
    pair_variance_ceiling: float = 0.20
    group_variance_ceiling: float = 0.10
    day_of_month_tolerance: int = 1
    month_end_day: int = 29
    month_start_day: int = 2
    key_word_count: int = 4
    key_min_word_length: int = 3
    amount_granularity: Decimal = Decimal(2)
    long_number_length: int = 10
    known_locations: tuple[str, ...] = (
        "SAN FRANCISCO",
        "COVINA",
        "SINGAPORE",
        "VANCOUVER",
        "MONTREAL",
        "TORONTO",
        "NEW YORK",
        "LOS ANGELES",
    )

    @field_validator("monthly_band", "annual_band")
    @classmethod
    def _ordered_band(cls, v: tuple[int, int]) -> tuple[int, int]:
        lo, hi = v
        if lo > hi:
            raise ValueError(f"band lower bound {lo} exceeds upper bound {hi}")
        return v

    @field_validator("amount_granularity")
    @classmethod
    def _positive_granularity(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("amount_granularity must be positive")
        return v


class LedgerConfig(BaseModel):
    """Injected configuration for every stage of the pipeline."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    category_keywords: dict[str, tuple[str, ...]] = _DEFAULT_CATEGORY_KEYWORDS
    default_category: str = "Other"
    month_names: dict[str, int] = _DEFAULT_MONTH_NAMES
    vendor_prefixes: tuple[str, ...] = (
        "pos",
        "debit",
        "credit",
        "ach",
        "check",
        "wire",
        "transfer",
    )
    noise_token_min_length: int = 6
    noise_token_max_length: int = 12
    vendor_max_length: int = 30
    issuer_markers: tuple[str, ...] = ("american express", "amex")
    summary_markers: tuple[str, ...] = ("summary", "last billed", "charges &", "payments &")
    region_codes: tuple[str, ...] = _DEFAULT_REGION_CODES
    detector: DetectorSettings = DetectorSettings()

    @field_validator("month_names")
    @classmethod
    def _valid_months(cls, v: dict[str, int]) -> dict[str, int]:
        bad = sorted(k for k, m in v.items() if not 1 <= m <= 12)
        if bad:
            raise ValueError(f"month numbers must be 1..12 (offending names: {bad})")
        return {k.strip().lower().rstrip("."): m for k, m in v.items()}

    @model_validator(mode="after")
    def _noise_bounds(self) -> LedgerConfig:
        if not 1 <= self.noise_token_min_length <= self.noise_token_max_length:
            raise ValueError("noise token lengths must satisfy 1 <= min <= max")
        return self


@lru_cache(maxsize=1)
def default_config() -> LedgerConfig:
    return LedgerConfig()


def load_config(path: str | PathLike[str]) -> LedgerConfig:
    """Read a JSON config file and overlay it on the defaults.

    Raises ``OSError`` when the file cannot be read and ``ValueError`` (a
    Pydantic ``ValidationError`` or ``json.JSONDecodeError``) when it is
    malformed.
    """

    raw: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"config file must hold a JSON object: {path}")
    base = default_config().model_dump()
    detector_overrides = raw.pop("detector", None) or {}
    if not isinstance(detector_overrides, dict):
        raise ValueError(f"'detector' must be a JSON object: {path}")
    base.update(raw)
    base["detector"] = {**base["detector"], **detector_overrides}
    return LedgerConfig.model_validate(base)


def config_from_env() -> LedgerConfig:
    """Return the config named by ``STATEMENT_LEDGER_CONFIG``, else the defaults."""

    path = os.getenv(CONFIG_PATH_ENV)
    if path and path.strip():
        return load_config(path.strip())
    return default_config()


def resolve_max_workers(n_items: int, requested: int | None = None) -> int:
    """Resolve a worker count for parallel per-file parsing.

    An explicit ``requested`` wins, then ``STATEMENT_LEDGER_MAX_WORKERS``;
    the result is capped to ``n_items`` and to 32 and is at least 1.
    """

    if requested is None:
        env_val = os.getenv(MAX_WORKERS_ENV)
        try:
            requested = int(env_val) if env_val else None
        except ValueError:
            requested = None
    if requested is not None and requested > 0:
        return max(1, min(requested, n_items, 32))
    return max(1, min(8, n_items))


__all__ = [
    "CONFIG_PATH_ENV",
    "MAX_WORKERS_ENV",
    "DetectorSettings",
    "LedgerConfig",
    "default_config",
    "load_config",
    "config_from_env",
    "resolve_max_workers",
]
