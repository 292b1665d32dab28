"""Worksheet rule engine. Pure functions, no side effects.

Each ``transform_*`` function takes a reconciled grid (row 0 is the header)
and returns ``(records, stats)``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence

from planilla_processor import (
    CLIENTES,
    DISTRIBUIDOR,
    LISTA_PRECIOS,
    LISTA_PRECIOS_TRADICIONAL,
    SN,
)
from planilla_processor.conditions import (
    DEFAULT_CONDITION_CODES,
    ConditionTable,
    map_condition_to_code,
)
from planilla_processor.errors import MissingColumnError
from planilla_processor.models import (
    Cell,
    ClientesRecord,
    DistribuidorRecord,
    Grid,
    ListaPreciosRecord,
    ListaPreciosTradicionalRecord,
    ProcessedData,
    Row,
    WorksheetStats,
)
from planilla_processor.normalize import (
    cell_text,
    is_blank,
    round_half_up,
    try_parse_numeric,
    upper_text,
)
from planilla_processor.schema import as_grid, find_worksheet, header_row
from planilla_processor.utils import find_column, header_matches

logger = logging.getLogger(__name__)

DEFAULT_IVA_RATE = 21.0

_DIGIT_RE = re.compile(r"\d")


# ── Row helpers ─────────────────────────────────────────────────


def _cell(row: Row, idx: int) -> Cell:
    if idx < 0 or idx >= len(row):
        return None
    return row[idx]


def _value_or_sn(row: Row, idx: int) -> Cell:
    value = _cell(row, idx)
    return SN if value is None else value


def _is_placeholder(value: Cell) -> bool:
    return is_blank(value) or value == SN


def _new_stats(sheet: str, grid: Grid, columns: Sequence[str]) -> WorksheetStats:
    return WorksheetStats(
        sheet_name=sheet,
        columns=list(columns),
        rows_in=max(0, len(grid) - 1),
    )


def _iva_rate_column(headers: Sequence[str]) -> int:
    idx = find_column(headers, "%", "iva")
    if idx < 0:
        idx = find_column(headers, "iva", exclude=("precio",))
    return idx


# ── DISTRIBUIDOR ────────────────────────────────────────────────


def transform_distribuidor(
    grid: Grid, conditions: ConditionTable = DEFAULT_CONDITION_CODES
) -> tuple[list[DistribuidorRecord], WorksheetStats]:
    """Uppercase emails, map Condicion Iva and move text-only CUITs into Nombre."""
    headers = header_row(grid)
    stats = _new_stats(DISTRIBUIDOR, grid, headers)
    if len(grid) <= 1:
        return [], stats

    email_idx = find_column(headers, "email")
    condicion_idx = find_column(headers, "condicion", "iva")
    cuit_idx = find_column(headers, "cuit")
    nombre_idx = find_column(headers, "nombre")

    records: list[DistribuidorRecord] = []
    for row in grid[1:]:
        transferred = ""
        cuit = _cell(row, cuit_idx)
        if isinstance(cuit, str) and not _DIGIT_RE.search(cuit):
            transferred = cuit.strip()

        values: dict[str, Cell] = {}
        for idx, header in enumerate(headers):
            value = _value_or_sn(row, idx)

            if idx == email_idx:
                upper = upper_text(value)
                if upper != value:
                    stats.bump("emails_converted")
                value = upper

            if idx == condicion_idx:
                mapped = map_condition_to_code(value, conditions)
                if isinstance(mapped, int) and isinstance(value, str):
                    stats.bump("condicion_iva_mapped")
                value = mapped

            if idx == cuit_idx and transferred:
                value = SN

            if idx == nombre_idx and transferred:
                current = cell_text(value).strip()
                if current and current != SN:
                    value = f"{current} - {transferred}"
                else:
                    value = transferred

            values[header] = value

        if transferred:
            stats.bump("cuit_transferred")
        records.append(DistribuidorRecord(values))

    stats.records_out = len(records)
    return records, stats


# ── LISTA DE PRECIOS ────────────────────────────────────────────


def transform_lista_precios(grid: Grid) -> tuple[list[ListaPreciosRecord], WorksheetStats]:
    """Pass rows through, defaulting absent cells to ``SN``."""
    headers = header_row(grid)
    stats = _new_stats(LISTA_PRECIOS, grid, headers)
    records = [
        ListaPreciosRecord({header: _value_or_sn(row, idx) for idx, header in enumerate(headers)})
        for row in grid[1:]
    ]
    stats.records_out = len(records)
    return records, stats


def price_list_code(records: Sequence[ListaPreciosRecord]) -> Cell:
    """Codigo of the first price-list record, or ``SN`` when there is none."""
    if not records:
        return SN
    code = records[0].codigo
    return SN if code is None else code


# ── LISTA DE PRECIOS TRADICIONAL ────────────────────────────────


def transform_lista_precios_tradicional(
    grid: Grid,
) -> tuple[list[ListaPreciosTradicionalRecord], WorksheetStats]:
    """Parse price/IVA columns and derive whichever price is missing."""
    headers = header_row(grid)
    stats = _new_stats(LISTA_PRECIOS_TRADICIONAL, grid, headers)
    if len(grid) <= 1:
        return [], stats

    sin_idx = find_column(headers, "precio sin iva")
    con_idx = find_column(headers, "precio con iva")
    iva_idx = _iva_rate_column(headers)
    numeric = {idx for idx in (sin_idx, con_idx, iva_idx) if idx >= 0}
    unparsed: dict[int, int] = {}

    records: list[ListaPreciosTradicionalRecord] = []
    for row in grid[1:]:
        out: list[Cell] = []
        for idx in range(len(headers)):
            value = _value_or_sn(row, idx)
            if idx in numeric:
                number, parsed = try_parse_numeric(value)
                if not parsed and not _is_placeholder(value):
                    unparsed[idx] = unparsed.get(idx, 0) + 1
                value = number
            out.append(value)

        precio_sin_iva = out[sin_idx] if sin_idx >= 0 else 0.0
        precio_con_iva = out[con_idx] if con_idx >= 0 else 0.0
        rate = (out[iva_idx] if iva_idx >= 0 else 0.0) or DEFAULT_IVA_RATE
        factor = 1 + float(rate) / 100

        if factor == 0:
            stats.warnings.append(f"% IVA de {rate} no permite calcular precios")
        else:
            if precio_con_iva and not precio_sin_iva and sin_idx >= 0:
                out[sin_idx] = round_half_up(float(precio_con_iva) / factor)
                stats.bump("prices_calculated")
                stats.bump("prices_without_iva")
            if precio_sin_iva and not precio_con_iva and con_idx >= 0:
                out[con_idx] = round_half_up(float(precio_sin_iva) * factor)
                stats.bump("prices_calculated")
                stats.bump("prices_with_iva")

        records.append(ListaPreciosTradicionalRecord(dict(zip(headers, out))))

    for idx, count in sorted(unparsed.items()):
        if count == 1:
            phrase = "valor no numérico en \"{}\" se tomó como 0"
        else:
            phrase = "valores no numéricos en \"{}\" se tomaron como 0"
        stats.warnings.append(f"{count} " + phrase.format(headers[idx]))

    stats.records_out = len(records)
    return records, stats


# ── CLIENTES ────────────────────────────────────────────────────


def transform_clientes(
    grid: Grid,
    list_code: Cell,
    conditions: ConditionTable = DEFAULT_CONDITION_CODES,
) -> tuple[list[ClientesRecord], WorksheetStats]:
    """Renumber Codigo, join Nombre + Direccion and stamp the price-list code.

    Raises
    ------
    MissingColumnError
        If no ``Codigo Lista precios`` column can be resolved.
    """
    headers = header_row(grid)
    list_code_idx = find_column(headers, "codigo", "lista", "precio")
    if list_code_idx < 0:
        raise MissingColumnError(CLIENTES, "Codigo Lista precios")

    codigo_idx = find_column(headers, "codigo", exclude=("lista",))
    nombre_idx = find_column(headers, "nombre")
    direccion_idx = find_column(headers, "direccion")
    condicion_idx = find_column(headers, "condicion", "iva")
    visita = {idx for idx, header in enumerate(headers) if header_matches(header, "visita")}

    columns = ["Codigo"] + [h for idx, h in enumerate(headers) if idx != codigo_idx]
    stats = _new_stats(CLIENTES, grid, columns)

    records: list[ClientesRecord] = []
    for position, row in enumerate(grid[1:]):
        values: dict[str, Cell] = {"Codigo": position + 1}
        stats.bump("codigos_generated")

        for idx, header in enumerate(headers):
            if idx == codigo_idx:
                continue
            original = _cell(row, idx)
            value: Cell = SN if original is None else original

            if idx in visita and is_blank(original):
                value = ""
                stats.bump("visita_blanks")

            if idx == nombre_idx and direccion_idx >= 0:
                nombre = cell_text(_cell(row, nombre_idx))
                direccion = cell_text(_cell(row, direccion_idx))
                value = f"{nombre} - {direccion}".strip()
                stats.bump("names_concatenated")

            if idx == list_code_idx:
                value = list_code
                stats.bump("price_lists_assigned")

            if idx == condicion_idx:
                mapped = map_condition_to_code(value, conditions)
                if isinstance(mapped, int) and isinstance(value, str):
                    stats.bump("condicion_iva_mapped")
                value = mapped

            values[header] = value

        records.append(ClientesRecord(values))

    stats.records_out = len(records)
    return records, stats


# ── Whole workbook ──────────────────────────────────────────────


def _sheet_grid(workbook: Mapping[str, Grid], sheet: str) -> Grid:
    key = find_worksheet(workbook, sheet)
    return as_grid(workbook[key]) if key is not None else ()


def process_worksheets(
    workbook: Mapping[str, Grid],
    conditions: ConditionTable = DEFAULT_CONDITION_CODES,
) -> ProcessedData:
    """Run the four worksheet transforms in their fixed order."""
    distribuidor, distribuidor_stats = transform_distribuidor(
        _sheet_grid(workbook, DISTRIBUIDOR), conditions
    )
    lista_precios, lista_stats = transform_lista_precios(_sheet_grid(workbook, LISTA_PRECIOS))
    tradicional, tradicional_stats = transform_lista_precios_tradicional(
        _sheet_grid(workbook, LISTA_PRECIOS_TRADICIONAL)
    )
    clientes, clientes_stats = transform_clientes(
        _sheet_grid(workbook, CLIENTES), price_list_code(lista_precios), conditions
    )

    stats = (distribuidor_stats, lista_stats, tradicional_stats, clientes_stats)
    for item in stats:
        logger.debug(
            "%s: %d rows -> %d records %s",
            item.sheet_name,
            item.rows_in,
            item.records_out,
            item.changes,
        )
    return ProcessedData(
        distribuidor=distribuidor,
        lista_precios=lista_precios,
        lista_precios_tradicional=tradicional,
        clientes=clientes,
        stats=stats,
    )
