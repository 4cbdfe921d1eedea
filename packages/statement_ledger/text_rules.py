"""Ordered string→string rewrite pipelines.

Vendor extraction, grouping-key normalization and variant normalization are
all sequences of small text transforms. Each transform is a pure
``TextRule`` so it can be unit-tested alone; :func:`apply_rules` threads a
value through a sequence of them.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

type TextRule = Callable[[str], str]


def regex_rule(pattern: str, repl: str = "", *, flags: int = 0) -> TextRule:
    """Return a rule substituting every match of ``pattern`` with ``repl``."""

    compiled = re.compile(pattern, flags)

    def _rule(text: str) -> str:
        return compiled.sub(repl, text)

    _rule.__name__ = f"sub({pattern!r})"
    return _rule


def strip_rule(text: str) -> str:
    return text.strip()


def lower_rule(text: str) -> str:
    return text.lower()


def collapse_whitespace_rule(text: str) -> str:
    return " ".join(text.split())


def alternation(words: Iterable[str]) -> str:
    """Build a regex alternation that matches any of ``words`` literally."""

    return "|".join(re.escape(w) for w in words)


def apply_rules(text: str, rules: Iterable[TextRule]) -> str:
    for rule in rules:
        text = rule(text)
    return text


__all__ = [
    "TextRule",
    "regex_rule",
    "strip_rule",
    "lower_rule",
    "collapse_whitespace_rule",
    "alternation",
    "apply_rules",
]
