"""Pytest configuration shared by the ``statement_ledger`` tests.

Puts the workspace ``packages/`` directory on ``sys.path`` so the package
imports without an install, and provides deterministic fixtures: an id
factory yielding ``tx-1``, ``tx-2``, ... and a ``make_tx`` builder for
hand-made transactions.
"""

from __future__ import annotations

import itertools
import sys
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR)] if p not in sys.path]

from statement_ledger.models import Direction, Transaction  # noqa: E402


@pytest.fixture
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"tx-{next(counter)}"


@pytest.fixture
def make_tx(id_factory: Callable[[], str]) -> Callable[..., Transaction]:
    """Build a :class:`Transaction` with sensible defaults.

    ``when`` accepts an ISO string; ``amount`` accepts anything ``Decimal``
    does (strings keep the cents exact).
    """

    def _make(
        when: str,
        amount: str | int,
        description: str = "NETFLIX.COM",
        *,
        vendor: str | None = None,
        direction: Direction = Direction.DEBIT,
        category: str = "Other",
        **extra: object,
    ) -> Transaction:
        return Transaction(
            id=id_factory(),
            date=date.fromisoformat(when),
            description=description,
            amount=Decimal(str(amount)),
            vendor=vendor if vendor is not None else description.title(),
            category=category,
            direction=direction,
            **extra,
        )

    return _make
