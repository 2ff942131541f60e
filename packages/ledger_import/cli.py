"""CLI for the ``ledger_import`` package.

This module exposes callable command handlers (``cmd_check``, ``cmd_show``)
and a Typer-based console interface installed as ``ledger-import``. Settings
(notably ``LEDGER_IMPORT_LEDGER_CURRENCY``) may be supplied through a local
``.env`` loaded with ``python-dotenv`` before any command runs. Parsing and
reconciliation live in ``ledger_import.api`` and the modules it calls.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import ArgumentInfo

from .api import import_ledger, load_ledger, read_export_text
from .config import LEDGER_CURRENCY_ENV_VAR, ImportSettings, load_settings
from .diagnostics import render_diagnostic
from .errors import LedgerImportError
from .logging_setup import configure_logging
from .models import Ledger
from .schemas import LedgerDocument


# ---- Small module-level helpers used by CLI commands -------------------------


def _read_source(path: Path) -> str | None:
    """Read and decode the export, reporting I/O problems on stderr."""

    try:
        return read_export_text(path.read_bytes())
    except UnicodeDecodeError as e:
        typer.echo(f"Error: {path} is not valid UTF-8: {e}", err=True)
    except OSError as e:
        typer.echo(f"Error: failed to read {path}: {e}", err=True)
    return None


def _resolve_settings() -> ImportSettings | None:
    """Load settings from the environment, reporting invalid values on stderr."""

    try:
        return load_settings()
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        typer.echo(f"Error: invalid {LEDGER_CURRENCY_ENV_VAR}: {problems}", err=True)
    return None


def _format_listing(ledger: Ledger) -> str:
    dr = ledger.date_range
    lines = [
        f"{ledger.ledger_name} ({dr.start_date.isoformat()} to {dr.end_date.isoformat()}, "
        f"{ledger.ledger_currency})",
        "",
        "Accounts:",
    ]
    width = max((len(name) for name in ledger.accounts), default=0)
    for name, info in ledger.accounts.items():
        lines.append(
            f"  {name:<{width}}  {info.account_currency}  "
            f"{info.start_balance.in_ledger_currency} -> {info.end_balance.in_ledger_currency}"
        )
    lines += ["", "Transactions:"]
    for txn in ledger.transactions:
        lines.append(f"  {txn.date.isoformat()}  {txn.description}")
        for p in txn.postings:
            lines.append(f"      {p.account_name:<{width}}  {p.amount.in_ledger_currency:>12}")
    return "\n".join(lines)


def cmd_check(path: Path) -> int:
    """Run the full import on ``path`` and print a one-line summary.

    Returns
    -------
    int
        ``0`` when the export parses and reconciles, ``1`` otherwise. Import
        errors are rendered against the source on stderr.
    """

    settings = _resolve_settings()
    if settings is None:
        return 1
    text = _read_source(path)
    if text is None:
        return 1
    try:
        ledger = import_ledger(text, settings=settings)
    except LedgerImportError as e:
        typer.echo(render_diagnostic(e, text), err=True)
        return 1

    merged = sum(1 for t in ledger.transactions if len(t.postings) == 2)
    single = sum(1 for t in ledger.transactions if len(t.postings) == 1)
    typer.echo(
        f"{path.name}: {len(ledger.accounts)} accounts, "
        f"{len(ledger.transactions)} transactions "
        f"({merged} merged, {single} single-posting)"
    )
    return 0


def cmd_show(path: Path, *, as_json: bool = False, merge: bool = True) -> int:
    """Print the imported ledger as JSON or as a short text listing.

    With ``merge=False`` the pre-merge ledger (one posting per transaction, in
    document order) is shown instead of the merged, date-ordered one.
    """

    settings = _resolve_settings()
    if settings is None:
        return 1
    text = _read_source(path)
    if text is None:
        return 1
    try:
        ledger = (
            import_ledger(text, settings=settings)
            if merge
            else load_ledger(text, settings=settings)
        )
    except LedgerImportError as e:
        typer.echo(render_diagnostic(e, text), err=True)
        return 1

    if as_json:
        doc = LedgerDocument.from_ledger(ledger)
        typer.echo(json.dumps(doc.model_dump(mode="json"), ensure_ascii=False, indent=2))
    else:
        typer.echo(_format_listing(ledger))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Parse and reconcile an accounting-software transaction export. "
        "Loads LEDGER_IMPORT_* settings from a local .env before running."
    ),
)


# Module-level argument object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
EXPORT_PATH_ARGUMENT: ArgumentInfo = typer.Argument(
    ...,  # required
    help="Path to an 'Account Transactions' CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler reports a clean error
)


@app.command("check")
def check_cmd(path: Annotated[Path, EXPORT_PATH_ARGUMENT]) -> None:
    """Validate an export end to end and print a summary."""

    raise typer.Exit(cmd_check(path))


@app.command("show")
def show_cmd(
    path: Annotated[Path, EXPORT_PATH_ARGUMENT],
    *,
    as_json: bool = typer.Option(False, "--json", help="Print the ledger as JSON."),
    merge: bool = typer.Option(
        True, "--merge/--no-merge", help="Merge matching postings into transactions."
    ),
) -> None:
    """Print the imported ledger."""

    raise typer.Exit(cmd_show(path, as_json=as_json, merge=merge))


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (falls back to LEDGER_IMPORT_LOG_LEVEL)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    try:
        configure_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m ledger_import.cli`
    app()
