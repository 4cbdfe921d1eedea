"""CLI for the ``statement_ledger`` package.

Thin Typer wrapper around :mod:`statement_ledger.api`: commands read files,
call the pure functions and print JSON. Settings (``STATEMENT_LEDGER_CONFIG``,
``STATEMENT_LEDGER_LOG_LEVEL``, ``STATEMENT_LEDGER_MAX_WORKERS``) may come
from a local ``.env``, loaded with ``python-dotenv`` before any command runs.

Failures reading inputs are reported on stderr with exit code 1; the core
itself never fails on malformed CSV rows, it drops them.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .config import LedgerConfig, config_from_env, load_config
from .logging_setup import configure_logging
from .models import Transaction

_TRANSACTIONS = TypeAdapter(list[Transaction])


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(1)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise _fail(f"File not found: {path}") from None
    except PermissionError:
        raise _fail(f"Permission denied: {path}") from None
    except UnicodeDecodeError as e:
        raise _fail(f"'{path}' is not UTF-8 text: {e}") from None


def _resolve_config(path: Path | None) -> LedgerConfig:
    try:
        return load_config(path) if path is not None else config_from_env()
    except OSError as e:
        raise _fail(f"cannot read config: {e}") from None
    except ValueError as e:
        raise _fail(f"invalid config: {e}") from None


def load_mappings(path: Path) -> dict[str, str]:
    """Read a vendor→category mapping file.

    Accepts ``{"mappings": {...}}`` (the shape the vendor-category store
    persists) or a flat ``{"Vendor": "Category"}`` object.
    """

    try:
        raw: Any = json.loads(_read_text(path))
    except json.JSONDecodeError as e:
        raise _fail(f"mappings file is not valid JSON: {e}") from None
    if isinstance(raw, Mapping) and isinstance(raw.get("mappings"), Mapping):
        raw = raw["mappings"]
    if not isinstance(raw, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
    ):
        raise _fail(f"mappings file must map vendor names to category names: {path}")
    return dict(raw)


def load_transactions(path: Path) -> list[Transaction]:
    """Read a JSON array of transactions (camelCase or snake_case keys)."""

    try:
        return _TRANSACTIONS.validate_json(_read_text(path))
    except ValidationError as e:
        raise _fail(f"'{path}' is not a transaction list: {e}") from None


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def _transactions_json(transactions: list[Transaction]) -> str:
    return _TRANSACTIONS.dump_json(transactions, by_alias=True, indent=2).decode()


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Convert bank/card CSV exports into a normalized transaction ledger and "
        "flag recurring subscription charges."
    ),
)


@app.command("ingest")
def ingest_cmd(
    files: Annotated[list[Path], typer.Argument(help="One or more CSV exports.")],
    *,
    mappings: Annotated[
        Path | None, typer.Option(help="JSON vendor→category overrides.")
    ] = None,
    output: Annotated[
        Path | None, typer.Option(help="Write the JSON ledger here instead of stdout.")
    ] = None,
    merge_variants: Annotated[
        int | None,
        typer.Option(
            min=2, help="Merge vendor spellings when a group has at least N variants."
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(min=1, help="Parse files in parallel (overrides env var)."),
    ] = None,
    config: Annotated[
        Path | None, typer.Option(help="JSON config file (overrides env var).")
    ] = None,
) -> None:
    """Parse, combine and flag recurring charges across CSV files."""

    # Deferred import to keep CLI startup fast
    from .api import auto_merge_vendors, parse_files

    cfg = _resolve_config(config)
    overrides = load_mappings(mappings) if mappings is not None else None
    texts = [_read_text(p) for p in files]

    transactions = parse_files(texts, overrides, config=cfg, concurrency=workers)
    merged_groups = 0
    if merge_variants is not None:
        result = auto_merge_vendors(transactions, merge_variants, config=cfg)
        transactions = result.transactions
        merged_groups = len(result.merged_groups)

    body = _transactions_json(transactions)
    if output is None:
        typer.echo(body)
        return

    try:
        output.write_text(body + "\n", encoding="utf-8")
    except OSError as e:
        raise _fail(f"cannot write '{output}': {e}") from None
    subscriptions = sum(1 for t in transactions if t.is_subscription)
    print(
        f"{len(transactions)} transactions ({subscriptions} recurring, "
        f"{merged_groups} vendor groups merged) -> {output}",
        file=sys.stderr,
    )


@app.command("variants")
def variants_cmd(
    file: Annotated[Path, typer.Argument(help="JSON array of transactions.")],
) -> None:
    """List vendors that appear under several spellings."""

    from .vendors import find_vendor_variants

    groups = find_vendor_variants(load_transactions(file), config=_resolve_config(None))
    typer.echo(
        _dump(
            [
                {
                    "normalizedName": g.normalized_name,
                    "variants": list(g.variants),
                    "transactionCount": g.transaction_count,
                }
                for g in groups
            ]
        )
    )


@app.command("subscriptions")
def subscriptions_cmd(
    file: Annotated[Path, typer.Argument(help="JSON array of transactions.")],
) -> None:
    """Summarize flagged subscriptions by vendor."""

    from .reports import monthly_subscription_total, summarize_subscriptions

    summaries = summarize_subscriptions(load_transactions(file))
    typer.echo(
        _dump(
            {
                "subscriptions": [
                    {to_camel(k): v for k, v in asdict(s).items()} for s in summaries
                ],
                "monthlyTotal": monthly_subscription_total(summaries),
            }
        )
    )


@app.callback()
def _root(
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Logging level for stderr output (default: STATEMENT_LEDGER_LOG_LEVEL or INFO).",
        ),
    ] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    app()
