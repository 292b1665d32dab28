#!/usr/bin/env python3
"""Build a deliberately messy sample input workbook for demos and manual checks."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from openpyxl import Workbook

VISITAS = [
    "Visita Lunes",
    "Visita Martes",
    "Visita Miercoles",
    "Visita Jueves",
    "Visita Viernes",
    "Visita Sabado",
    "Visita Domingo",
]

# DISTRIBUIDOR has no CUIT column and CLIENTES has no Codigo Lista precios,
# so a run exercises both positional insertions.
SHEETS: dict[str, list[list[Any]]] = {
    "DISTRIBUIDOR": [
        ["Codigo", "Nombre", "Telefono", "Email", "Condicion Iva", "Persona Contacto"],
        [101, "Distribuidora Sur", "011-4444-5555", "ventas@sur.com.ar", "Responsable Inscripto", "Ana Gomez"],
        [102, "Logistica Norte", None, "info@norte.com", "monotributo", "Carlos Ruiz"],
    ],
    "LISTA DE PRECIOS": [
        ["Codigo", "Nombre"],
        ["LP-01", "Lista General"],
        ["LP-02", "Lista Mayorista"],
    ],
    "LISTA DE PRECIOS TRADICIONAL": [
        [
            "Codigo de Lista",
            "Codigo Producto Bimbo",
            "Nombre del Producto",
            "Marca",
            "Categoria del producto",
            "Precio Sin IVA",
            "% IVA",
            "Precio con IVA",
        ],
        ["LP-01", "7501", "Pan Blanco Grande", "Bimbo", "Panificados", 100, 21, None],
        ["LP-01", "7502", "Pan Integral", "Bimbo", "Panificados", None, "21", "'1.452,00'"],
        ["LP-01", "7503", "Budin Vainilla", "Fargo", "Budines", "850,5", None, None],
        ["LP-01", "7504", "Tostadas", "Bimbo", "Tostadas", "consultar", 10.5, None],
    ],
    "CLIENTES": [
        [
            "Codigo",
            "Nombre",
            "Direccion",
            "Telefono",
            "Email",
            "CUIT",
            "Condicion Iva",
            "Persona Contacto",
            *VISITAS,
        ],
        [99, "Kiosco El Sol", "Av. Rivadavia 1234", "4555-1111", "elsol@mail.com", "20-11111111-1", "Monotributista", "Luis", "X", None, "X"],
        [5, "Almacen Don Pepe", "Calle 9 N 45", None, "pepe@mail.com", "20-22222222-2", "Exento", "Pepe", None, "X"],
        [7, "Supermercado Tres", None, "4555-3333", None, "30-33333333-3", "consumidor final", None],
    ],
}


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def build_sample_workbook(output: Path) -> Path:
    output.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    default = wb.active
    if default is not None:
        wb.remove(default)
    for name, rows in SHEETS.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    wb.save(output)
    return output


def main() -> None:
    parser = argparse.ArgumentParser(description="Build a sample planilla workbook")
    parser.add_argument(
        "--output",
        type=Path,
        default=_repo_root() / "sample" / "planilla_ejemplo.xlsx",
        help="Output .xlsx path.",
    )
    args = parser.parse_args()

    out = build_sample_workbook(args.output)
    print(f"Sample workbook -> {out}")
    print(f"Try: planilla run {out} --out-dir {out.parent / 'salida'}")


if __name__ == "__main__":
    main()
