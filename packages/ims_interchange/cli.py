"""CLI for the ``ims_interchange`` package.

A Typer-based console interface over local files. Environment variables
(``IMS_IMPORT_DIR``, ``IMS_EXPORT_DIR``, ``IMS_INTERCHANGE_LOG_LEVEL``) are
loaded from a local ``.env`` using ``python-dotenv`` before any command runs.
Business logic lives in :mod:`ims_interchange.api` and the modules it
re-exports; the commands here only read and write files.

Commands
--------
- ``check-digit SCHEME DIGITS``: print ``DIGITS`` with its check letter.
- ``decode REFERENCE``: print ``fund_code<TAB>account_reference``.
- ``transform KIND SOURCE_FILE [--out FILE]``: classify a source file and
  write the import batch as JSON (stdout by default).
- ``export FORMAT TRANSACTIONS_JSON --lookups LOOKUPS_JSON [--out PATH]
  [--run-at ISO]``: write one export file.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from .config import load_settings
from .logging_setup import configure_logging, get_logger
from .models import ExportFormat, ImportKind, NormalizedTransaction

_logger = get_logger("ims_interchange.cli")

# Errors that are the caller's fault (bad path, bad input); anything else is a bug.
_USER_ERRORS = (FileNotFoundError, PermissionError, ValidationError, ValueError)


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Encode and decode municipal payment interchange files. "
        "Loads IMS_* settings from a local .env before running."
    ),
)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _read_transactions(path: Path) -> list[NormalizedTransaction]:
    """Read a JSON array of transactions, or the ``rows`` of an import batch."""

    from .api import import_batch_adapter, load_transactions

    text = path.read_text(encoding="utf-8")
    if text.lstrip().startswith("{"):
        return list(import_batch_adapter.validate_json(text).rows)
    return load_transactions(text)


@app.command("check-digit")
def check_digit_cmd(
    scheme: Annotated[str, typer.Argument(help="Scheme name, e.g. council_tax.")],
    digits: Annotated[str, typer.Argument(help="The digits to protect.")],
) -> None:
    """Print DIGITS followed by the scheme's check letter."""

    from .api import SCHEMES, append_check_digit

    try:
        selected = SCHEMES[scheme]
    except KeyError:
        raise _fail(
            f"unknown scheme {scheme!r}; choose one of: {', '.join(sorted(SCHEMES))}"
        ) from None
    try:
        typer.echo(append_check_digit(selected, digits))
    except (ValueError, LookupError) as e:
        raise _fail(str(e)) from e


@app.command("decode")
def decode_cmd(
    reference: Annotated[str, typer.Argument(help="Payment-network reference number.")],
) -> None:
    """Print the fund code and account reference carried by REFERENCE."""

    from .api import decode

    decoded = decode(reference)
    typer.echo(f"{decoded.fund_code}\t{decoded.account_reference}")


@app.command("transform")
def transform_cmd(
    kind: Annotated[ImportKind, typer.Argument(help="Source file kind.")],
    source_file: Annotated[Path, typer.Argument(help="Source file to classify.")],
    out: Annotated[
        Path | None, typer.Option("--out", help="Write the batch JSON here instead of stdout.")
    ] = None,
) -> None:
    """Classify SOURCE_FILE and emit the import batch as JSON."""

    from .api import import_batch_adapter, load_import

    settings = load_settings()
    try:
        batch = load_import(kind, settings.import_path(source_file))
    except _USER_ERRORS as e:
        raise _fail(str(e)) from e

    payload = import_batch_adapter.dump_json(batch, indent=2).decode("utf-8")
    if out is None:
        typer.echo(payload)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload + "\n", encoding="utf-8")
    _logger.info(
        "%s: %d row(s), %d excluded", kind, batch.number_of_rows, batch.excluded
    )
    if batch.errors:
        typer.echo(f"{batch.excluded} row(s) excluded", err=True)


@app.command("export")
def export_cmd(
    fmt: Annotated[ExportFormat, typer.Argument(metavar="FORMAT", help="Export format.")],
    transactions_json: Annotated[
        Path, typer.Argument(help="JSON array of transactions, or an import batch.")
    ],
    lookups: Annotated[
        Path | None,
        typer.Option("--lookups", help="JSON with funds, methodsOfPayment and accountHolders."),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output file or directory (default: IMS_EXPORT_DIR)."),
    ] = None,
    run_at: Annotated[
        str | None,
        typer.Option("--run-at", help="ISO timestamp used in place of the current time."),
    ] = None,
) -> None:
    """Write the FORMAT export for the transactions in TRANSACTIONS_JSON."""

    from .api import ExportContext, LookupTables, write_export

    settings = load_settings()
    if out is None:
        settings.export_dir.mkdir(parents=True, exist_ok=True)
    try:
        transactions = _read_transactions(transactions_json)
        tables = (
            LookupTables.model_validate_json(lookups.read_text(encoding="utf-8"))
            if lookups is not None
            else LookupTables()
        )
        when = datetime.fromisoformat(run_at) if run_at else datetime.now()
        target = write_export(
            fmt,
            transactions,
            ExportContext(run_at=when, lookups=tables),
            settings.export_path(out),
        )
    except _USER_ERRORS as e:
        raise _fail(str(e)) from e
    typer.echo(str(target))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(load_settings().log_level)


def main() -> None:
    app(prog_name="ims-interchange")


if __name__ == "__main__":  # pragma: no cover
    main()
