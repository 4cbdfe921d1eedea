import textwrap
from datetime import date
from decimal import Decimal

import pytest

from statement_ledger.ingest import FormatKind, detect_format, parse_records
from statement_ledger.ingest.dispatch import FORMAT_RULES
from statement_ledger.models import Direction, RawRecord


def _dedent(s: str) -> str:
    # Keep internal newlines, but normalize indentation for readability.
    return textwrap.dedent(s).lstrip("\n").rstrip()


STATEMENT_CSV = _dedent(
    """
    Card statement, November 2025
    Date,Date Processed,Description,Amount,Foreign Amount
    01 Nov. 2025,,Summary of charges,$100.00,
    21 Nov. 2025,22 Nov. 2025,NETFLIX.COM,$16.49,
    19 Nov. 2025,19 Nov. 2025,PAYMENT RECEIVED - THANK YOU,"-$5,736.71",
    20 Nov. 2025,20 Nov. 2025,ZERO CHARGE,$0.00,
    """
)

PAYEE_CSV = _dedent(
    """
    Posted Date,Payee,Address,Amount
    11/03/2025,STARBUCKS #1234,"SEATTLE, WA",-5.75
    11/04/2025,PAYROLL DEPOSIT,,2500.00
    11/05/2025,X,,-3.00
    """
)

MULTI_COLUMN_CSV = _dedent(
    """
    JANE DOE,4111,11/02/2025,11/03/2025,SPOTIFY USA,CAD,11.99,
    JANE DOE,4111,,11/05/2025,PAYMENT THANK YOU,CAD,,250.00
    JANE DOE,4111,11/06/2025,11/07/2025,EMPTY ROW,CAD,,
    """
)

GENERIC_CSV = _dedent(
    """
    Date,Memo,Amount
    2025-10-01,Coffee Shop,(4.50)
    2025-10-02,Refund Store,12.00
    2025-10-03,2025-10-03,-9.99
    not a date,Broken Row,-1.00
    """
)

HEADERLESS_STATEMENT_CSV = _dedent(
    """
    AMEX export
    2025-01-05,NETFLIX.COM,CA,15.49
    2025-01-06,PAYMENT,-100.00
    """
)

FOREIGN_FIRST_STATEMENT_CSV = _dedent(
    """
    Date,Description,Foreign Amount,Amount
    2025-12-01,UBER TRIP LONDON,12.00,16.49
    2025-12-02,Last billed statement balance,,250.00
    2025-12-03,CHARGES & ADJUSTMENTS,,40.00
    2025-12-04,Payments & credits,,-300.00
    """
)


def test_rule_table_order_is_fixed():
    assert [r.kind for r in FORMAT_RULES] == [
        FormatKind.STATEMENT,
        FormatKind.PAYEE,
        FormatKind.MULTI_COLUMN,
        FormatKind.GENERIC,
    ]


@pytest.mark.parametrize(
    ("text", "kind"),
    [
        (STATEMENT_CSV, FormatKind.STATEMENT),
        (PAYEE_CSV, FormatKind.PAYEE),
        (MULTI_COLUMN_CSV, FormatKind.MULTI_COLUMN),
        (GENERIC_CSV, FormatKind.GENERIC),
        (HEADERLESS_STATEMENT_CSV, FormatKind.STATEMENT),
        ("American Express\n" + PAYEE_CSV, FormatKind.STATEMENT),
    ],
)
def test_detect_format(text, kind):
    assert detect_format(text) is kind


def test_statement_snapshot():
    assert parse_records(STATEMENT_CSV) == [
        RawRecord(date(2025, 11, 21), Decimal("16.49"), "NETFLIX.COM", Direction.DEBIT),
        RawRecord(
            date(2025, 11, 19),
            Decimal("5736.71"),
            "PAYMENT RECEIVED - THANK YOU",
            Direction.CREDIT,
        ),
    ]


def test_statement_without_header_reads_each_line():
    assert parse_records(HEADERLESS_STATEMENT_CSV) == [
        RawRecord(date(2025, 1, 5), Decimal("15.49"), "NETFLIX.COM CA", Direction.DEBIT),
        RawRecord(date(2025, 1, 6), Decimal("100.00"), "PAYMENT", Direction.CREDIT),
    ]


def test_statement_skips_foreign_amount_and_summary_rows():
    assert detect_format(FOREIGN_FIRST_STATEMENT_CSV) is FormatKind.STATEMENT
    assert parse_records(FOREIGN_FIRST_STATEMENT_CSV) == [
        RawRecord(date(2025, 12, 1), Decimal("16.49"), "UBER TRIP LONDON", Direction.DEBIT),
    ]


def test_payee_snapshot():
    assert parse_records(PAYEE_CSV) == [
        RawRecord(
            date(2025, 11, 3), Decimal("5.75"), "STARBUCKS #1234 SEATTLE, WA", Direction.DEBIT
        ),
        RawRecord(date(2025, 11, 4), Decimal("2500.00"), "PAYROLL DEPOSIT", Direction.CREDIT),
    ]


def test_multi_column_snapshot():
    assert parse_records(MULTI_COLUMN_CSV) == [
        RawRecord(date(2025, 11, 2), Decimal("11.99"), "SPOTIFY USA", Direction.DEBIT),
        RawRecord(date(2025, 11, 5), Decimal("250.00"), "PAYMENT THANK YOU", Direction.CREDIT),
    ]


def test_generic_snapshot():
    assert parse_records(GENERIC_CSV) == [
        RawRecord(date(2025, 10, 1), Decimal("4.50"), "Coffee Shop", Direction.DEBIT),
        RawRecord(date(2025, 10, 2), Decimal("12.00"), "Refund Store", Direction.CREDIT),
    ]


def test_generic_without_header_uses_default_columns():
    text = "2025-10-01,Corner Store,-3.10\n2025-10-02,Gift,20"
    assert parse_records(text) == [
        RawRecord(date(2025, 10, 1), Decimal("3.10"), "Corner Store", Direction.DEBIT),
        RawRecord(date(2025, 10, 2), Decimal("20"), "Gift", Direction.CREDIT),
    ]


def test_bom_and_crlf_are_tolerated():
    text = "\ufeffDate,Memo,Amount\r\n2025-10-01,Coffee Shop,-4.50\r\n"
    assert detect_format(text) is FormatKind.GENERIC
    assert len(parse_records(text)) == 1


@pytest.mark.parametrize("text", ["", "\n\n", "   \r\n  "])
def test_empty_input_yields_nothing(text):
    assert detect_format(text) is None
    assert parse_records(text) == []


def test_every_record_satisfies_row_rules():
    for text in (STATEMENT_CSV, PAYEE_CSV, MULTI_COLUMN_CSV, GENERIC_CSV):
        for rec in parse_records(text):
            assert rec.amount > 0
            assert len(rec.description) >= 2
