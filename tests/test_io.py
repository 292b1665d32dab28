from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from planilla_processor.errors import FormatError
from planilla_processor.io import (
    check_extension,
    frame_to_grid,
    output_file_name,
    read_workbook,
    write_json,
)

from conftest import build_xlsx


def test_read_workbook_drops_empty_rows_and_trailing_cells(tmp_path: Path) -> None:
    path = build_xlsx(
        tmp_path / "in.xlsx",
        {
            "LISTA DE PRECIOS": [
                ["Codigo", "Nombre"],
                [1, None],
                [None, None],
                ["LP2", "General"],
            ],
            "Otra": [["a"]],
        },
    )

    workbook = read_workbook(path)

    assert list(workbook) == ["LISTA DE PRECIOS", "Otra"]
    assert workbook["LISTA DE PRECIOS"] == (
        ("Codigo", "Nombre"),
        (1,),
        ("LP2", "General"),
    )


def test_read_workbook_keeps_inner_blank_cells_as_empty_text(tmp_path: Path) -> None:
    path = build_xlsx(
        tmp_path / "in.xlsx",
        {"DISTRIBUIDOR": [["Codigo", "Nombre", "Telefono", "Email"], [10, "Sur", None, "a@b.com"]]},
    )

    grid = read_workbook(path)["DISTRIBUIDOR"]

    assert grid[1] == (10, "Sur", "", "a@b.com")


def test_read_workbook_uses_openpyxl_with_raw_cells(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    xlsx_path = tmp_path / "data.xlsx"
    xlsx_path.write_bytes(b"x")

    calls: list[dict[str, object]] = []

    def _fake_read_excel(path: Path, **kwargs: object) -> dict[str, pd.DataFrame]:
        calls.append({"path": path, **kwargs})
        return {"CLIENTES": pd.DataFrame([["Codigo"], [7]], dtype=object)}

    monkeypatch.setattr(pd, "read_excel", _fake_read_excel)

    result = read_workbook(xlsx_path)

    assert result == {"CLIENTES": (("Codigo",), (7,))}
    assert len(calls) == 1
    assert calls[0]["path"] == xlsx_path
    assert calls[0]["engine"] == "openpyxl"
    assert calls[0]["sheet_name"] is None
    assert calls[0]["header"] is None
    assert calls[0]["dtype"] is object


def test_read_workbook_xls_missing_xlrd_raises_friendly_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    xls_path = tmp_path / "legacy.xls"
    xls_path.write_bytes(b"x")

    def _fake_read_excel(path: Path, **kwargs: object) -> dict[str, pd.DataFrame]:
        del path, kwargs
        raise ImportError("No module named xlrd")

    monkeypatch.setattr(pd, "read_excel", _fake_read_excel)

    with pytest.raises(ValueError, match="xlrd"):
        read_workbook(xls_path)


def test_read_workbook_rejects_directory_path(tmp_path: Path) -> None:
    input_dir = tmp_path / "fake.xlsx"
    input_dir.mkdir()

    with pytest.raises(ValueError, match="not a file"):
        read_workbook(input_dir)


def test_read_workbook_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_workbook(tmp_path / "nope.xlsx")


def test_read_workbook_rejects_unsupported_extension(tmp_path: Path) -> None:
    csv_path = tmp_path / "data.csv"
    csv_path.write_text("a,b\n", encoding="utf-8")

    with pytest.raises(FormatError, match=r"\.xlsx o \.xls"):
        read_workbook(csv_path)


@pytest.mark.parametrize("name", ["a.xlsx", "B.XLS", "c.xlsm"])
def test_check_extension_accepts_spreadsheets(name: str) -> None:
    check_extension(Path(name))


def test_output_file_name_always_targets_xlsx() -> None:
    assert output_file_name("clientes.xlsx") == "procesado_clientes.xlsx"
    assert output_file_name("viejo.xls") == "procesado_viejo.xlsx"
    assert output_file_name("sin_extension") == "procesado_sin_extension.xlsx"


def test_frame_to_grid_converts_numpy_and_dates() -> None:
    df = pd.DataFrame(
        [
            ["Codigo", "Alta", "Activo", "Monto"],
            [np.int64(3), datetime(2024, 1, 2), True, np.nan],
        ],
        dtype=object,
    )

    grid = frame_to_grid(df)

    assert grid[0] == ("Codigo", "Alta", "Activo", "Monto")
    assert grid[1] == (3, "2024-01-02T00:00:00", "TRUE")
    assert type(grid[1][0]) is int


def test_write_json_is_atomic_and_deterministic(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "artifact.json"
    payload = {
        "b": 1,
        "a": datetime(2024, 1, 2, 3, 4, 5),
        "path": Path("foo/bar"),
    }

    out = write_json(path, payload)

    assert out == path
    text = path.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert '"a": "2024-01-02T03:04:05"' in text
    assert '"path": "foo/bar"' in text
    assert text.index('"a"') < text.index('"b"') < text.index('"path"')
    assert not path.with_suffix(path.suffix + ".tmp").exists()


def test_write_json_keeps_accented_text(tmp_path: Path) -> None:
    path = tmp_path / "artifact.json"

    write_json(path, {"message": "Archivo procesado con éxito"})

    assert "éxito" in path.read_text(encoding="utf-8")


def test_write_json_serializes_item_scalar(tmp_path: Path) -> None:
    path = tmp_path / "artifact.json"
    value = pd.Series([7], dtype="int64").iloc[0]

    write_json(path, {"value": value})

    text = path.read_text(encoding="utf-8")
    assert '"value": 7' in text


def test_write_json_raises_on_unknown_type(tmp_path: Path) -> None:
    class Unknown:
        pass

    path = tmp_path / "artifact.json"

    with pytest.raises(TypeError, match="not JSON serializable"):
        write_json(path, {"x": Unknown()})
