from __future__ import annotations

import pytest

from planilla_processor import CLIENTES, DISTRIBUIDOR, LISTA_PRECIOS_TRADICIONAL
from planilla_processor.models import (
    ClientesRecord,
    ColumnValidationResult,
    DistribuidorRecord,
    ListaPreciosTradicionalRecord,
    ProcessedData,
    ProcessingResult,
    WorksheetStats,
)


def test_column_validation_to_dict_returns_list_copies() -> None:
    cv = ColumnValidationResult(
        sheet_name=DISTRIBUIDOR,
        missing_columns=["CUIT"],
        added_columns=["CUIT"],
        existing_columns=["Codigo", "Nombre"],
    )

    payload = cv.to_dict()
    payload["added_columns"].append("Email")

    assert cv.added_columns == ("CUIT",)
    assert payload["existing_columns"] == ["Codigo", "Nombre"]


def test_column_validation_rejects_non_string_lists() -> None:
    with pytest.raises(TypeError, match="existing_columns"):
        ColumnValidationResult(sheet_name=CLIENTES, existing_columns=["Codigo", 1])  # type: ignore[list-item]

    with pytest.raises(TypeError, match="missing_columns"):
        ColumnValidationResult(sheet_name=CLIENTES, missing_columns="CUIT")  # type: ignore[arg-type]


def test_column_validation_accepts_none_for_list_fields() -> None:
    cv = ColumnValidationResult(sheet_name=CLIENTES, added_columns=None)  # type: ignore[arg-type]

    assert cv.added_columns == ()


def test_worksheet_stats_rejects_negative_and_non_integer_counts() -> None:
    with pytest.raises(ValueError, match="rows_in"):
        WorksheetStats(sheet_name=CLIENTES, rows_in=-1)

    with pytest.raises(TypeError, match="records_out"):
        WorksheetStats(sheet_name=CLIENTES, records_out=True)  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="emails_converted"):
        WorksheetStats(sheet_name=CLIENTES, changes={"emails_converted": -3})


def test_worksheet_stats_bump_and_sorted_dict() -> None:
    stats = WorksheetStats(sheet_name=DISTRIBUIDOR)
    stats.bump("emails_converted")
    stats.bump("cuit_transferred", 2)
    stats.bump("emails_converted")

    assert stats.to_dict()["changes"] == {"cuit_transferred": 2, "emails_converted": 2}
    assert list(stats.to_dict()["changes"]) == ["cuit_transferred", "emails_converted"]


def test_records_are_read_only() -> None:
    record = DistribuidorRecord({"Codigo": 1, "Nombre": "Juan"})

    with pytest.raises(TypeError):
        record.values["Nombre"] = "Pedro"  # type: ignore[index]

    assert record["Nombre"] == "Juan"
    assert record.sheet == DISTRIBUIDOR
    assert record.email is None


def test_tradicional_iva_prefers_rate_column_over_price_columns() -> None:
    record = ListaPreciosTradicionalRecord(
        {"Precio Sin IVA": 100.0, "% IVA": 21.0, "Precio con IVA": 121.0}
    )

    assert record.iva == 21.0
    assert record.precio_sin_iva == 100.0
    assert record.precio_con_iva == 121.0
    assert record.sheet == LISTA_PRECIOS_TRADICIONAL


def test_tradicional_iva_falls_back_to_bare_iva_header() -> None:
    record = ListaPreciosTradicionalRecord({"Precio Sin IVA": 100.0, "IVA": 10.5})

    assert record.iva == 10.5


def test_clientes_visitas_only_returns_visit_columns() -> None:
    record = ClientesRecord({"Codigo": 1, "Nombre": "Kiosco", "Visita Lunes": "X", "Visita Martes": ""})

    assert record.visitas == {"Visita Lunes": "X", "Visita Martes": ""}
    assert record.codigo == 1


def test_processed_data_counts_and_warnings() -> None:
    stats = WorksheetStats(sheet_name=LISTA_PRECIOS_TRADICIONAL, warnings=["aviso"])
    data = ProcessedData(
        distribuidor=[DistribuidorRecord({"Codigo": 1})],
        clientes=[ClientesRecord({"Codigo": 1}), ClientesRecord({"Codigo": 2})],
        stats=[stats],
    )

    assert data.counts()[CLIENTES] == 2
    assert data.counts()[DISTRIBUIDOR] == 1
    assert data.warnings == ["aviso"]
    assert data.stats_for(LISTA_PRECIOS_TRADICIONAL) is stats
    assert data.stats_for(CLIENTES) is None
    assert data.to_dict()["clientes"] == [{"Codigo": 1}, {"Codigo": 2}]


def test_processing_result_to_dict_failure_contract() -> None:
    result = ProcessingResult(
        success=False,
        file_name="x.xlsx",
        message="Faltan hojas requeridas",
        errors=["Falta la hoja: CLIENTES"],
    )

    assert result.to_dict() == {
        "success": False,
        "file_name": "x.xlsx",
        "message": "Faltan hojas requeridas",
        "errors": ["Falta la hoja: CLIENTES"],
        "column_validation": None,
        "processed_data": None,
        "output_file": None,
        "warnings": [],
        "elapsed_ms": 0,
    }


def test_processing_result_rejects_negative_elapsed() -> None:
    with pytest.raises(ValueError, match="elapsed_ms"):
        ProcessingResult(success=True, file_name="x.xlsx", message="ok", elapsed_ms=-1)
