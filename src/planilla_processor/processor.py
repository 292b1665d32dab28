"""Batch orchestration: one ProcessingResult per input file, never raising."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path

from planilla_processor import (
    CLIENTES,
    DISTRIBUIDOR,
    LISTA_PRECIOS,
    LISTA_PRECIOS_TRADICIONAL,
)
from planilla_processor.conditions import DEFAULT_CONDITION_CODES, ConditionTable
from planilla_processor.errors import FormatError, MissingWorksheetError
from planilla_processor.io import check_extension, output_file_name, read_workbook
from planilla_processor.models import Grid, ProcessedData, ProcessingResult
from planilla_processor.pipeline import process_worksheets
from planilla_processor.report import write_workbook
from planilla_processor.schema import missing_worksheets, reconcile_columns

logger = logging.getLogger(__name__)

WorkbookReader = Callable[[Path], Mapping[str, Grid]]
WorkbookWriter = Callable[[Path, ProcessedData], object]

MSG_SUCCESS = "Archivo procesado con éxito"
MSG_MISSING_SHEETS = "Faltan hojas requeridas"
MSG_FAILED = "Fallo el procesamiento"
ERR_INVALID_FORMAT = "Formato de archivo inválido"

_COUNT_LABELS: tuple[tuple[str, str], ...] = (
    (DISTRIBUIDOR, "distribuidores"),
    (LISTA_PRECIOS, "listas de precios"),
    (LISTA_PRECIOS_TRADICIONAL, "precios tradicionales"),
    (CLIENTES, "clientes"),
)


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.perf_counter() - start) * 1000))


def process_file(
    path: Path,
    *,
    out_dir: Path | None = None,
    reader: WorkbookReader = read_workbook,
    writer: WorkbookWriter = write_workbook,
    conditions: ConditionTable = DEFAULT_CONDITION_CODES,
) -> ProcessingResult:
    """Process one workbook and write ``procesado_<name>.xlsx``.

    The output goes to *out_dir* (default: next to the input). Every failure
    is returned as an unsuccessful result instead of raised.
    """
    path = Path(path)
    file_name = path.name
    start = time.perf_counter()
    logger.info("Processing %s", file_name)

    try:
        check_extension(path)
    except FormatError as exc:
        logger.warning("%s: %s", file_name, exc)
        return ProcessingResult(
            success=False,
            file_name=file_name,
            message=str(exc),
            errors=[ERR_INVALID_FORMAT],
            elapsed_ms=_elapsed_ms(start),
        )

    try:
        workbook = reader(path)

        missing = missing_worksheets(workbook)
        if missing:
            raise MissingWorksheetError(missing)

        reconciled, validation = reconcile_columns(workbook)
        processed = process_worksheets(reconciled, conditions)

        output_path = Path(out_dir if out_dir is not None else path.parent) / output_file_name(
            file_name
        )
        writer(output_path, processed)
    except MissingWorksheetError as exc:
        logger.warning("%s: %s", file_name, exc)
        return ProcessingResult(
            success=False,
            file_name=file_name,
            message=MSG_MISSING_SHEETS,
            errors=exc.errors(),
            elapsed_ms=_elapsed_ms(start),
        )
    except Exception as exc:
        logger.warning("%s: %s", file_name, exc, exc_info=logger.isEnabledFor(logging.DEBUG))
        return ProcessingResult(
            success=False,
            file_name=file_name,
            message=f"{MSG_FAILED}: {exc}",
            errors=[str(exc)],
            elapsed_ms=_elapsed_ms(start),
        )

    logger.info("%s -> %s", file_name, output_path)
    return ProcessingResult(
        success=True,
        file_name=file_name,
        message=MSG_SUCCESS,
        column_validation=validation,
        processed_data=processed,
        output_file=str(output_path),
        warnings=processed.warnings,
        elapsed_ms=_elapsed_ms(start),
    )


def process_files(
    paths: Iterable[Path],
    *,
    out_dir: Path | None = None,
    reader: WorkbookReader = read_workbook,
    writer: WorkbookWriter = write_workbook,
    conditions: ConditionTable = DEFAULT_CONDITION_CODES,
) -> list[ProcessingResult]:
    """Process *paths* one at a time, in order; one result per input."""
    return [
        process_file(p, out_dir=out_dir, reader=reader, writer=writer, conditions=conditions)
        for p in paths
    ]


# ── Summary ──────────────────────────────────────────────────────


def _validation_lines(result: ProcessingResult) -> list[str]:
    lines: list[str] = []
    for cv in result.column_validation or ():
        line = (
            f"   Columnas {cv.sheet_name}: {len(cv.existing_columns)} existentes, "
            f"{len(cv.added_columns)} agregadas, {len(cv.missing_columns)} faltantes"
        )
        if cv.added_columns:
            line += f" (agregadas: {', '.join(cv.added_columns)})"
        lines.append(line)
    return lines


def format_summary(results: Sequence[ProcessingResult]) -> str:
    """Human-readable, deterministic report over *results*."""
    success_count = sum(1 for r in results if r.success)
    lines: list[str] = [f"Se procesaron {success_count}/{len(results)} archivos con éxito.", ""]

    for result in results:
        lines.append(f"📁 {result.file_name}:")
        lines.append(f"   {'✅' if result.success else '❌'} {result.message}")
        if result.errors:
            lines.append(f"   Errores: {', '.join(result.errors)}")
        lines.extend(_validation_lines(result))
        for warning in result.warnings:
            lines.append(f"   Advertencia: {warning}")
        if result.processed_data is not None:
            counts = result.processed_data.counts()
            parts = [f"{counts[sheet]} {label}" for sheet, label in _COUNT_LABELS]
            lines.append(f"   Procesados: {', '.join(parts)}")
        if result.output_file:
            lines.append(f"   Archivo generado: {Path(result.output_file).name}")
        lines.append("")

    return "\n".join(lines)
