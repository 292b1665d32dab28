"""Column schema reconciliation: detect and insert missing required columns."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from planilla_processor import (
    CLIENTES,
    DISTRIBUIDOR,
    REQUIRED_COLUMNS,
    REQUIRED_SHEETS,
)
from planilla_processor.errors import MissingAnchorColumnError, MissingWorksheetError
from planilla_processor.models import Cell, ColumnValidationResult, Grid, Row
from planilla_processor.normalize import cell_text
from planilla_processor.utils import column_present, find_column

logger = logging.getLogger(__name__)

AnchorRule = tuple[str, Callable[[Sequence[object]], int]]

# (sheet, column) -> (anchor name, resolver returning the anchor index)
INSERT_BEFORE: dict[tuple[str, str], AnchorRule] = {
    (DISTRIBUIDOR, "CUIT"): ("Nombre", lambda headers: find_column(headers, "nombre")),
    (CLIENTES, "Codigo Lista precios"): (
        "Visita Lunes",
        lambda headers: find_column(headers, "visita", "lunes"),
    ),
}


# ── Grid helpers ────────────────────────────────────────────────


def as_grid(rows: Sequence[Sequence[Cell]]) -> Grid:
    """Freeze *rows* into an immutable grid value."""
    return tuple(tuple(row) for row in rows)


def header_row(grid: Grid) -> list[str]:
    if not grid:
        return []
    return [cell_text(cell) for cell in grid[0]]


def insert_column(grid: Grid, index: int, name: str, fill: Cell = "") -> Grid:
    """Return a new grid with column *name* spliced in at *index*.

    Data rows receive *fill* at the new position. Rows shorter than *index*
    are padded with absent cells first so existing values keep their columns.
    """
    if index < 0:
        raise ValueError(f"index must be >= 0, got {index}")
    header: Row = tuple(grid[0]) if grid else ()
    index = min(index, len(header))

    def _splice(row: Row, value: Cell) -> Row:
        padded = row + (None,) * max(0, index - len(row))
        return padded[:index] + (value,) + padded[index:]

    rows: list[Row] = [_splice(header, name)]
    rows.extend(_splice(tuple(row), fill) for row in grid[1:])
    return tuple(rows)


# ── Worksheet lookup ────────────────────────────────────────────


def find_worksheet(workbook: Mapping[str, Grid], name: str) -> str | None:
    """Return the actual key for worksheet *name* (case-insensitive), if any."""
    wanted = name.lower()
    for key in workbook:
        if str(key).lower() == wanted:
            return key
    return None


def missing_worksheets(workbook: Mapping[str, Grid]) -> list[str]:
    """Required worksheet names absent from *workbook*, in manifest order."""
    return [name for name in REQUIRED_SHEETS if find_worksheet(workbook, name) is None]


# ── Reconciliation ──────────────────────────────────────────────


def _insert_position(sheet: str, column: str, headers: Sequence[object]) -> int:
    rule = INSERT_BEFORE.get((sheet, column))
    if rule is None:
        return len(headers)
    anchor, resolve = rule
    idx = resolve(headers)
    if idx < 0:
        raise MissingAnchorColumnError(sheet, column, anchor)
    return idx


def reconcile_sheet(sheet: str, grid: Grid) -> tuple[Grid, ColumnValidationResult]:
    """Insert every required column *sheet* lacks; return the new grid + report."""
    existing = header_row(grid)
    missing = [col for col in REQUIRED_COLUMNS[sheet] if not column_present(existing, col)]

    # Anchors must exist in the sheet as read, not among inserted columns.
    for column in missing:
        _insert_position(sheet, column, existing)

    added: list[str] = []
    for column in missing:
        headers = header_row(grid)
        position = _insert_position(sheet, column, headers)
        grid = insert_column(grid, position, column)
        added.append(column)
        logger.info("%s: added column %r at position %d", sheet, column, position + 1)

    logger.debug("%s: %d existing, %d added", sheet, len(existing), len(added))
    result = ColumnValidationResult(
        sheet_name=sheet,
        missing_columns=missing,
        added_columns=added,
        existing_columns=existing,
    )
    return grid, result


def reconcile_columns(
    workbook: Mapping[str, Grid],
) -> tuple[dict[str, Grid], list[ColumnValidationResult]]:
    """Reconcile all required worksheets of *workbook*.

    Returns ``(workbook_copy, validation_results)``. Only worksheets that
    received columns are replaced in the copy; the input is not modified.

    Raises
    ------
    MissingWorksheetError
        If a required worksheet is absent.
    MissingAnchorColumnError
        If a positional insertion cannot find its anchor column.
    """
    missing = missing_worksheets(workbook)
    if missing:
        raise MissingWorksheetError(missing)

    updated: dict[str, Grid] = dict(workbook)
    results: list[ColumnValidationResult] = []
    for sheet in REQUIRED_SHEETS:
        key = find_worksheet(workbook, sheet) or sheet
        grid, result = reconcile_sheet(sheet, as_grid(workbook[key]))
        if result.added_columns:
            updated[key] = grid
        results.append(result)
    return updated, results
