"""CLI entry point for planilla-processor."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table as RichTable

from planilla_processor import REQUIRED_SHEETS, __version__
from planilla_processor.conditions import (
    DEFAULT_CONDITION_CODES,
    ConditionTable,
    load_condition_table,
)
from planilla_processor.errors import MissingWorksheetError, ProcessingError
from planilla_processor.io import read_workbook
from planilla_processor.models import ColumnValidationResult, ProcessingResult
from planilla_processor.processor import format_summary, process_file
from planilla_processor.qc import write_processing_report
from planilla_processor.schema import missing_worksheets, reconcile_columns

app = typer.Typer(
    name="planilla",
    help="planilla-processor — Repair and normalize distributor workbooks.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

PACKAGE_LOGGER = "planilla_processor"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"planilla-processor v{__version__}")
        raise typer.Exit()


def _setup_logging(*, verbose: bool, quiet: bool) -> logging.Logger:
    """Route package logs through a single RichHandler on stderr."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(console=err_console, show_path=False, show_time=verbose)
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def _load_conditions(path: Path | None) -> ConditionTable:
    if path is None:
        return DEFAULT_CONDITION_CODES
    return load_condition_table(path)


def _results_table(results: list[ProcessingResult]) -> RichTable:
    tbl = RichTable(title="Resultados", show_lines=True)
    tbl.add_column("Archivo", style="bold")
    tbl.add_column("Estado")
    tbl.add_column("Detalle")
    for result in results:
        status = "[green]OK[/green]" if result.success else "[red]FALLO[/red]"
        detail = result.message
        if result.errors:
            detail += "\n" + "\n".join(result.errors)
        tbl.add_row(result.file_name, status, detail)
    return tbl


def _validation_table(file_name: str, validation: list[ColumnValidationResult]) -> RichTable:
    tbl = RichTable(title=f"Columnas: {file_name}", show_lines=True)
    tbl.add_column("Hoja", style="bold")
    tbl.add_column("Existentes", justify="right")
    tbl.add_column("Faltantes")
    tbl.add_column("Estado")
    for cv in validation:
        missing = ", ".join(cv.missing_columns) if cv.missing_columns else "[green]ninguna[/green]"
        status = "[yellow]SE AGREGAN[/yellow]" if cv.added_columns else "[green]OK[/green]"
        tbl.add_row(cv.sheet_name, str(len(cv.existing_columns)), missing, status)
    return tbl


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """planilla-processor CLI."""


# ── run command ──────────────────────────────────────────────────


@app.command()
def run(
    files: list[Path] = typer.Argument(
        ..., help="One or more .xlsx/.xls workbooks to process.",
    ),
    out_dir: Path | None = typer.Option(
        None, "--out-dir", "-o",
        envvar="PLANILLA_OUT_DIR",
        help="Directory for processed workbooks + report (default: next to each input).",
    ),
    conditions: Path | None = typer.Option(
        None, "--conditions", "-c",
        envvar="PLANILLA_CONDITIONS",
        help="Condicion IVA table file (Label=code lines).",
    ),
    json_report: bool = typer.Option(
        True, "--json/--no-json",
        help="Write processing_report.json alongside the outputs.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log every reconciliation and rule step.",
    ),
) -> None:
    """Process workbooks: add missing columns, apply rules, write procesado_*.xlsx."""
    echo = _printer(quiet)
    _setup_logging(verbose=verbose, quiet=quiet)

    try:
        table = _load_conditions(conditions)
    except ValueError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    if not quiet:
        console.print(Panel(
            f"[bold]planilla-processor[/bold] v{__version__}\n"
            f"Archivos: {len(files)}\n"
            f"Salida:   {out_dir if out_dir is not None else '(junto a cada archivo)'}",
            title="Inicio", border_style="blue",
        ))

    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    results: list[ProcessingResult] = []
    try:
        for path in files:
            echo(f"[blue]>[/blue] {path.name} …")
            result = process_file(path, out_dir=out_dir, conditions=table)
            results.append(result)
            if result.success:
                echo(f"  [green]ok[/green] -> {result.output_file}")
            else:
                echo(f"  [red]x[/red] {result.message}")

        if json_report:
            report_dir = out_dir if out_dir is not None else Path.cwd()
            report_path = write_processing_report(report_dir, results)
            echo(f"  Report -> {report_path}")
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    if not quiet:
        console.print(_results_table(results))
        console.print(
            format_summary(results), markup=False, highlight=False, emoji=False, soft_wrap=True
        )

    failed = sum(1 for r in results if not r.success)
    if failed:
        _err(f"{failed} de {len(results)} archivos fallaron")
        raise typer.Exit(code=2)


# ── validate command ─────────────────────────────────────────────


@app.command()
def validate(
    files: list[Path] = typer.Argument(
        ..., help="One or more .xlsx/.xls workbooks to check.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only print failures.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log every reconciliation step.",
    ),
) -> None:
    """Check worksheets and required columns without writing anything.

    Exit 0 = every file can be processed, exit 2 = at least one cannot.
    """
    _setup_logging(verbose=verbose, quiet=quiet)
    failures = 0

    for path in files:
        try:
            workbook = read_workbook(path)
            missing = missing_worksheets(workbook)
            if missing:
                raise MissingWorksheetError(missing)
            _, validation = reconcile_columns(workbook)
        except ProcessingError as exc:
            failures += 1
            _err(f"{path.name}: {'; '.join(exc.errors())}")
            continue
        except Exception as exc:
            failures += 1
            _err(f"{path.name}: {exc}")
            continue

        if not quiet:
            console.print(_validation_table(path.name, validation))

    if failures:
        console.print(f"  Expected sheets: {', '.join(REQUIRED_SHEETS)}")
        raise typer.Exit(code=2)
