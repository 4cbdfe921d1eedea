import json
import textwrap

import pytest
from typer.testing import CliRunner

from statement_ledger import cli
from statement_ledger.config import CONFIG_PATH_ENV

runner = CliRunner()

CSV_A = textwrap.dedent(
    """\
    Date,Memo,Amount
    2025-01-14,NETFLIX.COM,-35.00
    2025-02-15,NETFLIX.COM,-36.50
    2025-02-20,TOM SUSHI,-20.00
    """
)

CSV_B = textwrap.dedent(
    """\
    Date,Memo,Amount
    2025-02-15,NETFLIX.COM,-36.50
    2025-03-14,NETFLIX.COM,-37.00
    2025-03-01,PAYROLL,1500.00
    """
)


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    """Run each command in an empty directory with logging left unconfigured."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)


@pytest.fixture
def csv_files(tmp_path):
    a, b = tmp_path / "a.csv", tmp_path / "b.csv"
    a.write_text(CSV_A, encoding="utf-8")
    b.write_text(CSV_B, encoding="utf-8")
    return a, b


def test_ingest_writes_camel_case_json(tmp_path, csv_files):
    out = tmp_path / "ledger.json"

    result = runner.invoke(cli.app, ["ingest", *map(str, csv_files), "--output", str(out)])

    assert result.exit_code == 0, result.output
    rows = json.loads(out.read_text(encoding="utf-8"))
    assert len(rows) == 5
    assert {"id", "date", "vendor", "isSubscription", "subscriptionFrequency"} <= set(rows[0])
    flagged = [r for r in rows if r["isSubscription"]]
    assert {r["description"] for r in flagged} == {"NETFLIX.COM"}
    assert {r["subscriptionFrequency"] for r in flagged} == {"monthly"}


def test_ingest_to_stdout_with_mappings(tmp_path, csv_files):
    mappings = tmp_path / "vendor-categories.json"
    mappings.write_text(json.dumps({"mappings": {"Tom Sushi": "Restaurants"}}), encoding="utf-8")

    result = runner.invoke(cli.app, ["ingest", str(csv_files[0]), "--mappings", str(mappings)])

    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert {r["vendor"]: r["category"] for r in rows}["Tom Sushi"] == "Restaurants"


def test_ingest_accepts_flat_mappings(tmp_path):
    mappings = tmp_path / "flat.json"
    mappings.write_text(json.dumps({"Tom Sushi": "Restaurants"}), encoding="utf-8")
    assert cli.load_mappings(mappings) == {"Tom Sushi": "Restaurants"}


def test_ingest_missing_file_exits_with_error(tmp_path):
    result = runner.invoke(cli.app, ["ingest", str(tmp_path / "nope.csv")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_ingest_bad_mappings_exits_with_error(tmp_path, csv_files):
    mappings = tmp_path / "bad.json"
    mappings.write_text("[1, 2]", encoding="utf-8")

    result = runner.invoke(cli.app, ["ingest", str(csv_files[0]), "--mappings", str(mappings)])

    assert result.exit_code == 1
    assert "mappings" in result.output


def test_ingest_merges_variants(tmp_path):
    src = tmp_path / "sushi.csv"
    src.write_text(
        "Date,Memo,Amount\n"
        "2025-01-01,TOM SUSHI BC,-20.00\n"
        "2025-01-05,TOM SUSHI BC,-22.00\n"
        "2025-01-09,TOM SUSHI,-18.00\n",
        encoding="utf-8",
    )
    out = tmp_path / "ledger.json"

    result = runner.invoke(
        cli.app, ["ingest", str(src), "--merge-variants", "2", "--output", str(out)]
    )

    assert result.exit_code == 0, result.output
    rows = json.loads(out.read_text(encoding="utf-8"))
    assert {r["vendor"] for r in rows} == {"Tom Sushi Bc"}


def test_variants_and_subscriptions_read_a_ledger(tmp_path, csv_files):
    ledger = tmp_path / "ledger.json"
    runner.invoke(cli.app, ["ingest", *map(str, csv_files), "--output", str(ledger)])
    rows = json.loads(ledger.read_text(encoding="utf-8"))
    # rows are newest first: NETFLIX, PAYROLL, TOM SUSHI, NETFLIX, NETFLIX
    rows[1]["vendor"] = "Tom Sushi #50929 BC"
    rows[2]["vendor"] = "Tom Sushi #50788 BC"
    ledger.write_text(json.dumps(rows), encoding="utf-8")

    variants = runner.invoke(cli.app, ["variants", str(ledger)])
    subs = runner.invoke(cli.app, ["subscriptions", str(ledger)])

    assert variants.exit_code == 0, variants.output
    groups = json.loads(variants.output)
    assert groups[0]["normalizedName"] == "tom sushi"
    assert sorted(groups[0]["variants"]) == ["Tom Sushi #50788 BC", "Tom Sushi #50929 BC"]

    assert subs.exit_code == 0, subs.output
    payload = json.loads(subs.output)
    assert payload["monthlyTotal"] == "36.17"
    (netflix,) = [s for s in payload["subscriptions"] if s["name"] == "Netflix.com"]
    assert netflix["chargeCount"] == 3
    assert netflix["lastCharge"] == "2025-03-14"


def test_variants_rejects_non_ledger_json(tmp_path):
    bogus = tmp_path / "bogus.json"
    bogus.write_text(json.dumps({"not": "a list"}), encoding="utf-8")

    result = runner.invoke(cli.app, ["variants", str(bogus)])

    assert result.exit_code == 1
    assert "not a transaction list" in result.output


def test_log_level_option_reaches_logging_setup(tmp_path, monkeypatch):
    levels = []
    monkeypatch.setattr(cli, "configure_logging", levels.append)
    ledger = tmp_path / "empty.json"
    ledger.write_text("[]", encoding="utf-8")

    result = runner.invoke(cli.app, ["--log-level", "DEBUG", "subscriptions", str(ledger)])

    assert result.exit_code == 0, result.output
    assert levels == ["DEBUG"]
    assert json.loads(result.output)["subscriptions"] == []
