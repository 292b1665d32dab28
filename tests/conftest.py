from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest
from openpyxl import Workbook

from planilla_processor import (
    CLIENTES,
    DISTRIBUIDOR,
    LISTA_PRECIOS,
    LISTA_PRECIOS_TRADICIONAL,
    VISITA_COLUMNS,
)

SheetRows = Sequence[Sequence[object]]

CLIENTES_HEADER = [
    "Codigo",
    "Nombre",
    "Direccion",
    "Telefono",
    "Email",
    "CUIT",
    "Condicion Iva",
    "Persona Contacto",
    *VISITA_COLUMNS,
]

TRADICIONAL_HEADER = [
    "Codigo de Lista",
    "Codigo Producto Bimbo",
    "Nombre del Producto",
    "Marca",
    "Categoria del producto",
    "Precio Sin IVA",
    "% IVA",
    "Precio con IVA",
]


def build_xlsx(path: Path, sheets: Mapping[str, SheetRows]) -> Path:
    """Write *sheets* (name -> rows, header first) to an .xlsx file."""
    wb = Workbook()
    default = wb.active
    if default is not None:
        wb.remove(default)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    wb.save(path)
    return path


def sample_sheets() -> dict[str, SheetRows]:
    """Four worksheets; DISTRIBUIDOR lacks CUIT, CLIENTES lacks Codigo Lista precios."""
    visitas = ["X", None, None, None, None, None, None]
    return {
        DISTRIBUIDOR: [
            ["Codigo", "Nombre", "Telefono", "Email", "Condicion Iva", "Persona Contacto"],
            [10, "Distribuidora Sur", "4444-5555", "ventas@sur.com", "Responsable Inscripto", "Ana"],
        ],
        LISTA_PRECIOS: [
            ["Codigo", "Nombre"],
            ["LP1", "General"],
            ["LP2", "Mayorista"],
        ],
        LISTA_PRECIOS_TRADICIONAL: [
            TRADICIONAL_HEADER,
            ["LP1", "P-001", "Pan Lactal", "Bimbo", "Panificados", 100, 21, None],
        ],
        CLIENTES: [
            CLIENTES_HEADER,
            [99, "Kiosco Uno", "Calle 1", "111", "uno@mail.com", "20-1-1", "Monotributista", "Luis", *visitas],
            [5, "Almacen Dos", "Calle 2", "222", "dos@mail.com", "20-2-2", "Exento", "Marta", *visitas],
            [7, "Super Tres", "Calle 3", "333", "tres@mail.com", "20-3-3", "consumidor final", "Juan", *visitas],
        ],
    }


@pytest.fixture
def sample_workbook(tmp_path: Path) -> Path:
    return build_xlsx(tmp_path / "clientes.xlsx", sample_sheets())
