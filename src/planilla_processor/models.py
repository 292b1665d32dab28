"""Data models / typed records used across the package."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from numbers import Integral
from types import MappingProxyType
from typing import Any, ClassVar, Union

from planilla_processor import (
    CLIENTES,
    DISTRIBUIDOR,
    LISTA_PRECIOS,
    LISTA_PRECIOS_TRADICIONAL,
    REQUIRED_SHEETS,
)
from planilla_processor.utils import find_column, header_matches

Cell = Union[str, int, float, None]
Row = tuple[Cell, ...]
Grid = tuple[Row, ...]
Workbook = Mapping[str, Grid]


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


# ── Column validation ───────────────────────────────────────────


@dataclass(frozen=True)
class ColumnValidationResult:
    """Outcome of column reconciliation for one worksheet."""

    sheet_name: str
    missing_columns: tuple[str, ...] = ()
    added_columns: tuple[str, ...] = ()
    existing_columns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("missing_columns", "added_columns", "existing_columns"):
            values = _to_string_list(getattr(self, name), name)
            object.__setattr__(self, name, tuple(values))

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheet_name": self.sheet_name,
            "missing_columns": list(self.missing_columns),
            "added_columns": list(self.added_columns),
            "existing_columns": list(self.existing_columns),
        }


# ── Processed records ───────────────────────────────────────────


@dataclass(frozen=True)
class SheetRecord:
    """One output row: column name -> final value, in output column order."""

    sheet: ClassVar[str] = ""

    values: Mapping[str, Cell]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, column: str) -> Cell:
        return self.values[column]

    @property
    def columns(self) -> list[str]:
        return list(self.values)

    def lookup(self, *fragments: str, exclude: Sequence[str] = ()) -> Cell:
        """Value of the first column whose header matches *fragments*."""
        keys = list(self.values)
        idx = find_column(keys, *fragments, exclude=exclude)
        return None if idx < 0 else self.values[keys[idx]]

    def to_dict(self) -> dict[str, Cell]:
        return dict(self.values)


@dataclass(frozen=True)
class DistribuidorRecord(SheetRecord):
    sheet: ClassVar[str] = DISTRIBUIDOR

    @property
    def codigo(self) -> Cell:
        return self.lookup("codigo")

    @property
    def nombre(self) -> Cell:
        return self.lookup("nombre")

    @property
    def cuit(self) -> Cell:
        return self.lookup("cuit")

    @property
    def email(self) -> Cell:
        return self.lookup("email")

    @property
    def condicion_iva(self) -> Cell:
        return self.lookup("condicion", "iva")


@dataclass(frozen=True)
class ListaPreciosRecord(SheetRecord):
    sheet: ClassVar[str] = LISTA_PRECIOS

    @property
    def codigo(self) -> Cell:
        return self.lookup("codigo")

    @property
    def nombre(self) -> Cell:
        return self.lookup("nombre")


@dataclass(frozen=True)
class ListaPreciosTradicionalRecord(SheetRecord):
    sheet: ClassVar[str] = LISTA_PRECIOS_TRADICIONAL

    @property
    def codigo_lista(self) -> Cell:
        return self.lookup("codigo", "lista")

    @property
    def precio_sin_iva(self) -> Cell:
        return self.lookup("precio sin iva")

    @property
    def iva(self) -> Cell:
        keys = list(self.values)
        idx = find_column(keys, "%", "iva")
        if idx < 0:
            idx = find_column(keys, "iva", exclude=("precio",))
        return None if idx < 0 else self.values[keys[idx]]

    @property
    def precio_con_iva(self) -> Cell:
        return self.lookup("precio con iva")


@dataclass(frozen=True)
class ClientesRecord(SheetRecord):
    sheet: ClassVar[str] = CLIENTES

    @property
    def codigo(self) -> Cell:
        return self.values.get("Codigo")

    @property
    def nombre(self) -> Cell:
        return self.lookup("nombre")

    @property
    def direccion(self) -> Cell:
        return self.lookup("direccion")

    @property
    def condicion_iva(self) -> Cell:
        return self.lookup("condicion", "iva")

    @property
    def codigo_lista_precios(self) -> Cell:
        return self.lookup("codigo", "lista", "precio")

    @property
    def visitas(self) -> dict[str, Cell]:
        return {k: v for k, v in self.values.items() if header_matches(k, "visita")}


ProcessedRecord = Union[
    DistribuidorRecord,
    ListaPreciosRecord,
    ListaPreciosTradicionalRecord,
    ClientesRecord,
]


# ── Per-worksheet statistics ────────────────────────────────────


@dataclass
class WorksheetStats:
    """What the rule engine did to one worksheet.

    ``changes`` holds named counters (e.g. ``emails_converted``);
    ``warnings`` holds human-readable notes such as numeric fallbacks.
    """

    sheet_name: str
    columns: list[str] = field(default_factory=list)
    rows_in: int = 0
    records_out: int = 0
    changes: dict[str, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.records_out = _to_non_negative_int(self.records_out, "records_out")
        self.columns = _to_string_list(self.columns, "columns")
        self.warnings = _to_string_list(self.warnings, "warnings")
        self.changes = {
            str(name): _to_non_negative_int(count, f"changes[{name!r}]")
            for name, count in dict(self.changes).items()
        }

    def bump(self, counter: str, amount: int = 1) -> None:
        self.changes[counter] = self.changes.get(counter, 0) + amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheet_name": self.sheet_name,
            "columns": list(self.columns),
            "rows_in": self.rows_in,
            "records_out": self.records_out,
            "changes": dict(sorted(self.changes.items())),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ProcessedData:
    """The four processed-record collections for one input file."""

    distribuidor: tuple[DistribuidorRecord, ...] = ()
    lista_precios: tuple[ListaPreciosRecord, ...] = ()
    lista_precios_tradicional: tuple[ListaPreciosTradicionalRecord, ...] = ()
    clientes: tuple[ClientesRecord, ...] = ()
    stats: tuple[WorksheetStats, ...] = ()

    def __post_init__(self) -> None:
        for name in (
            "distribuidor",
            "lista_precios",
            "lista_precios_tradicional",
            "clientes",
            "stats",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def records_for(self, sheet: str) -> tuple[SheetRecord, ...]:
        by_sheet: dict[str, tuple[SheetRecord, ...]] = {
            DISTRIBUIDOR: self.distribuidor,
            LISTA_PRECIOS: self.lista_precios,
            LISTA_PRECIOS_TRADICIONAL: self.lista_precios_tradicional,
            CLIENTES: self.clientes,
        }
        return by_sheet[sheet]

    def stats_for(self, sheet: str) -> WorksheetStats | None:
        for item in self.stats:
            if item.sheet_name == sheet:
                return item
        return None

    def counts(self) -> dict[str, int]:
        return {sheet: len(self.records_for(sheet)) for sheet in REQUIRED_SHEETS}

    @property
    def warnings(self) -> list[str]:
        return [w for item in self.stats for w in item.warnings]

    def to_dict(self) -> dict[str, Any]:
        return {
            "distribuidor": [r.to_dict() for r in self.distribuidor],
            "lista_precios": [r.to_dict() for r in self.lista_precios],
            "lista_precios_tradicional": [r.to_dict() for r in self.lista_precios_tradicional],
            "clientes": [r.to_dict() for r in self.clientes],
            "stats": [s.to_dict() for s in self.stats],
        }


# ── Per-file result ─────────────────────────────────────────────


@dataclass(frozen=True)
class ProcessingResult:
    """Terminal outcome of processing one input file."""

    success: bool
    file_name: str
    message: str
    errors: tuple[str, ...] | None = None
    column_validation: tuple[ColumnValidationResult, ...] | None = None
    processed_data: ProcessedData | None = None
    output_file: str | None = None
    warnings: tuple[str, ...] = ()
    elapsed_ms: int = 0

    def __post_init__(self) -> None:
        if self.errors is not None:
            object.__setattr__(self, "errors", tuple(_to_string_list(self.errors, "errors")))
        if self.column_validation is not None:
            object.__setattr__(self, "column_validation", tuple(self.column_validation))
        object.__setattr__(self, "warnings", tuple(_to_string_list(self.warnings, "warnings")))
        object.__setattr__(self, "elapsed_ms", _to_non_negative_int(self.elapsed_ms, "elapsed_ms"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "file_name": self.file_name,
            "message": self.message,
            "errors": list(self.errors) if self.errors is not None else None,
            "column_validation": (
                [cv.to_dict() for cv in self.column_validation]
                if self.column_validation is not None
                else None
            ),
            "processed_data": (
                self.processed_data.to_dict() if self.processed_data is not None else None
            ),
            "output_file": self.output_file,
            "warnings": list(self.warnings),
            "elapsed_ms": self.elapsed_ms,
        }
