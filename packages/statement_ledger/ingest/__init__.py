"""CSV ingestion: tokenizing, format sniffing and per-layout adapters."""

from .dispatch import FormatKind, detect_format, parse_records
from .lines import parse_amount, split_lines, tokenize_line

__all__ = [
    "FormatKind",
    "detect_format",
    "parse_records",
    "parse_amount",
    "split_lines",
    "tokenize_line",
]
