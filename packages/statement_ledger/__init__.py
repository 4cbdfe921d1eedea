"""Statement ledger: turn heterogeneous bank/card CSV exports into a ledger.

Public surface re-exported from :mod:`statement_ledger.api` and friends.
"""

from .api import (
    auto_merge_vendors,
    combine_transactions,
    detect_recurring,
    find_vendor_variants,
    normalize_vendor,
    parse,
    parse_files,
)
from .config import LedgerConfig, default_config, load_config
from .models import (
    Direction,
    Frequency,
    MergeResult,
    RawRecord,
    Transaction,
    VendorVariantGroup,
)

__all__ = [
    "parse",
    "parse_files",
    "detect_recurring",
    "normalize_vendor",
    "find_vendor_variants",
    "auto_merge_vendors",
    "combine_transactions",
    "LedgerConfig",
    "default_config",
    "load_config",
    "Direction",
    "Frequency",
    "MergeResult",
    "RawRecord",
    "Transaction",
    "VendorVariantGroup",
]
