"""I/O helpers — read input workbooks, write JSON artifacts."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, cast

import pandas as pd

from planilla_processor.errors import FormatError
from planilla_processor.models import Cell, Grid, Row

SUPPORTED_SUFFIXES = (".xlsx", ".xlsm", ".xls")
OUTPUT_PREFIX = "procesado_"

# ── Names ────────────────────────────────────────────────────────


def check_extension(path: Path) -> None:
    """Raise :class:`FormatError` unless *path* looks like a spreadsheet."""
    if Path(path).suffix.lower() not in SUPPORTED_SUFFIXES:
        raise FormatError("El archivo debe ser .xlsx o .xls")


def output_file_name(name: str) -> str:
    """``clientes.xls`` -> ``procesado_clientes.xlsx``."""
    path = Path(name)
    base = path.stem if path.suffix.lower() in SUPPORTED_SUFFIXES else path.name
    return f"{OUTPUT_PREFIX}{base}.xlsx"


# ── Loading ──────────────────────────────────────────────────────


def _grid_cell(value: Any) -> Cell:
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, (str, int, float)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    item = getattr(value, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float)):
            return converted
    return str(value)


def frame_to_grid(df: pd.DataFrame) -> Grid:
    """Convert a header-less frame into a grid.

    Trailing empty cells are trimmed (they are absent), empty cells before
    the last filled one become ``""`` and fully empty rows are dropped.
    """
    rows: list[Row] = []
    for raw in df.itertuples(index=False, name=None):
        cells = [_grid_cell(value) for value in raw]
        while cells and cells[-1] is None:
            cells.pop()
        if cells:
            rows.append(tuple("" if cell is None else cell for cell in cells))
    return tuple(rows)


def read_workbook(path: Path) -> dict[str, Grid]:
    """Read every worksheet of *path* into ``{sheet name: grid}``.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    FormatError
        If the extension is not supported.
    ValueError
        If ``.xls`` input is given without ``xlrd`` installed.
    """
    path = Path(path)
    check_extension(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise ValueError(f"Input path is a directory, not a file: {path}")

    engine = "xlrd" if path.suffix.lower() == ".xls" else "openpyxl"
    read_excel = cast(Callable[..., dict[str, pd.DataFrame]], getattr(pd, "read_excel"))
    try:
        sheets = read_excel(path, sheet_name=None, header=None, dtype=object, engine=engine)
    except ImportError as exc:
        raise ValueError(
            "Unsupported .xls input unless 'xlrd' is installed. "
            "Either convert to .xlsx or add dependency: pip install xlrd"
        ) from exc

    return {str(name): frame_to_grid(df) for name, df in sheets.items()}


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
