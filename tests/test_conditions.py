from __future__ import annotations

from pathlib import Path

import pytest

from planilla_processor.conditions import (
    DEFAULT_CONDITION_CODES,
    MATCH_TIERS,
    load_condition_table,
    lookup_condition_code,
    map_condition_to_code,
    match_exact,
)


def test_mapping_is_case_insensitive() -> None:
    lower = map_condition_to_code("responsable inscripto")
    upper = map_condition_to_code("RESPONSABLE INSCRIPTO")

    assert lower == upper == 1


@pytest.mark.parametrize(
    ("text", "code"),
    [
        ("Responsable No Inscripto", 2),
        ("No Responsable", 3),
        ("  Exento  ", 4),
        ("Monotributista", 6),
    ],
)
def test_exact_labels_map_to_their_codes(text: str, code: int) -> None:
    assert map_condition_to_code(text) == code


def test_substring_tier_matches_label_inside_text() -> None:
    assert map_condition_to_code("IVA Responsable Inscripto") == 1
    assert map_condition_to_code("Consumidor") == 5


def test_first_word_tier_is_last_resort() -> None:
    assert map_condition_to_code("Consumidor ocasional") == 5


def test_unknown_text_is_returned_trimmed() -> None:
    assert map_condition_to_code("  Otro  ") == "Otro"


@pytest.mark.parametrize("value", [4, 2.0, None, "", "SN"])
def test_numbers_and_placeholders_pass_through(value: object) -> None:
    assert map_condition_to_code(value) == value  # type: ignore[arg-type]


def test_custom_table_and_tiers_are_used_in_order() -> None:
    table = (("Exento", 40), ("Exento Total", 41))

    assert lookup_condition_code("exento total", table) == 41
    assert lookup_condition_code("exento total", table, tiers=MATCH_TIERS[1:]) == 40
    assert lookup_condition_code("exento parcial", table, tiers=(match_exact,)) is None


def test_default_table_order_is_stable() -> None:
    assert [code for _label, code in DEFAULT_CONDITION_CODES] == [1, 2, 3, 4, 5, 6]


def test_load_condition_table_reads_label_code_lines(tmp_path: Path) -> None:
    path = tmp_path / "condiciones.txt"
    path.write_text("# codigos AFIP\n\nExento = 9\nResponsable Inscripto=1\n", encoding="utf-8")

    table = load_condition_table(path)

    assert table == (("Exento", 9), ("Responsable Inscripto", 1))
    assert map_condition_to_code("EXENTO", table) == 9


@pytest.mark.parametrize(
    ("content", "match"),
    [
        ("Exento\n", "expected Label=code"),
        ("Exento=cuatro\n", "must be an integer"),
        ("=4\n", "empty label"),
        ("# nada\n", "no entries"),
    ],
)
def test_load_condition_table_rejects_malformed_files(
    tmp_path: Path, content: str, match: str
) -> None:
    path = tmp_path / "condiciones.txt"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError, match=match):
        load_condition_table(path)


def test_load_condition_table_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        load_condition_table(tmp_path / "nope.txt")


def test_load_condition_table_directory(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="directory"):
        load_condition_table(tmp_path)
