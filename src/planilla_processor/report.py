"""Excel output writer — produces ``procesado_<name>.xlsx``."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from planilla_processor import REQUIRED_SHEETS
from planilla_processor.models import ProcessedData, SheetRecord
from planilla_processor.utils import find_column

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

CURRENCY_FMT = '#,##0.00'
RATE_FMT = '0.00'

# (header fragments, excluded fragments) -> number format for data rows
_COL_FORMATS: tuple[tuple[tuple[str, ...], tuple[str, ...], str], ...] = (
    (("precio",), ("codigo", "lista"), CURRENCY_FMT),
    (("%", "iva"), (), RATE_FMT),
)

# Column width = header length + padding (capped)
_WIDTH_PADDING = 15
_MAX_WIDTH = 60


# ── Helpers ──────────────────────────────────────────────────────


def _style_header(ws: Worksheet, ncols: int) -> None:
    for c in range(1, ncols + 1):
        cell = ws.cell(row=1, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN


def _set_widths(ws: Worksheet, col_names: Sequence[str]) -> None:
    for c_idx, name in enumerate(col_names, 1):
        letter = get_column_letter(c_idx)
        ws.column_dimensions[letter].width = min(len(name) + _WIDTH_PADDING, _MAX_WIDTH)


def _number_format(name: str) -> str | None:
    for fragments, exclude, fmt in _COL_FORMATS:
        if find_column([name], *fragments, exclude=exclude) == 0:
            return fmt
    return None


def _apply_number_formats(ws: Worksheet, col_names: Sequence[str]) -> None:
    """Apply number formats to data columns (rows 2+) by column name."""
    if ws.max_row < 2:
        return

    for c_idx, name in enumerate(col_names, 1):
        fmt = _number_format(name)
        if fmt:
            for row in ws.iter_rows(min_row=2, max_row=ws.max_row, min_col=c_idx, max_col=c_idx):
                for cell in row:
                    if isinstance(cell.value, (int, float)):
                        cell.number_format = fmt


def _excel_value(val: Any) -> Any:
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        return val

    # openpyxl treats a leading "=" as a formula
    if isinstance(val, str) and val.startswith("="):
        return f"'{val}"
    return val


def records_to_frame(records: Sequence[SheetRecord], columns: Sequence[str]) -> pd.DataFrame:
    """Build an object-dtype frame with *columns* in order."""
    if records:
        columns = records[0].columns
    return pd.DataFrame(
        [[record.values.get(col) for col in columns] for record in records],
        columns=list(columns),
        dtype=object,
    )


def _df_to_sheet(wb: Workbook, name: str, df: pd.DataFrame) -> None:
    ws = wb.create_sheet(title=name)
    col_names = [str(c) for c in df.columns]
    if not col_names:
        return

    for c_idx, col_name in enumerate(col_names, 1):
        ws.cell(row=1, column=c_idx, value=col_name)
    for r_idx, row_vals in enumerate(df.itertuples(index=False, name=None), 2):
        for c_idx, val in enumerate(row_vals, 1):
            ws.cell(row=r_idx, column=c_idx, value=_excel_value(val))
    _style_header(ws, len(col_names))
    _apply_number_formats(ws, col_names)
    ws.freeze_panes = "A2"
    if len(df) > 0:
        ws.auto_filter.ref = ws.dimensions
    _set_widths(ws, col_names)


# ── Public API ───────────────────────────────────────────────────


def write_workbook(path: Path, data: ProcessedData) -> Path:
    """Write the four processed worksheets to *path* and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    active_sheet = wb.active
    if active_sheet is not None:
        wb.remove(active_sheet)  # remove default sheet

    for sheet in REQUIRED_SHEETS:
        stats = data.stats_for(sheet)
        columns = stats.columns if stats is not None else []
        _df_to_sheet(wb, sheet, records_to_frame(data.records_for(sheet), columns))

    tmp_path = path.with_name(f"{path.stem}.tmp{path.suffix}")
    wb.save(tmp_path)
    tmp_path.replace(path)
    return path
