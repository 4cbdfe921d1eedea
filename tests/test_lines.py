from decimal import Decimal

import pytest

from statement_ledger.ingest.lines import AMOUNT_TOKEN_RE, parse_amount, split_lines, tokenize_line


@pytest.mark.parametrize(
    ("line", "fields"),
    [
        ("a,b,c", ["a", "b", "c"]),
        ('a,"b,c",d', ["a", "b,c", "d"]),
        ('a,"say ""hi""",b', ["a", 'say "hi"', "b"]),
        ("a,,b,", ["a", "", "b", ""]),
        ('"-$5,736.71",x', ["-$5,736.71", "x"]),
        ("", [""]),
    ],
)
def test_tokenize_line(line, fields):
    assert tokenize_line(line) == fields


def test_split_lines_drops_blank_lines_bom_and_crlf():
    assert split_lines("\ufeffa,b\r\n\r\n  c,d  \n\n") == ["a,b", "c,d"]
    assert split_lines("") == []
    assert split_lines(" \n\t\n") == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("16.49", Decimal("16.49")),
        ("$1,234.56", Decimal("1234.56")),
        ("-$5,736.71", Decimal("-5736.71")),
        ("$-2.00", Decimal("-2.00")),
        ("(12.50)", Decimal("-12.50")),
        ("$(3.00)", Decimal("-3.00")),
        ("+7", Decimal("7")),
        ("12.34 €", Decimal("12.34")),
        ("0", Decimal("0")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "  ", "-", "abc", "NaN", "Infinity", "1.2.3"])
def test_parse_amount_rejects_non_numbers(raw):
    assert parse_amount(raw) is None


def test_amount_token_pattern():
    assert AMOUNT_TOKEN_RE.match("15.49")
    assert AMOUNT_TOKEN_RE.match("-$1,200.00")
    assert not AMOUNT_TOKEN_RE.match("NETFLIX.COM")
    assert not AMOUNT_TOKEN_RE.match("CA")
