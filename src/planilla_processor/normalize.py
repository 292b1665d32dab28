"""Locale-tolerant numeric parsing and small cell/text transforms."""

from __future__ import annotations

import math
import re
from numbers import Real

from planilla_processor.models import Cell

_QUOTES_AND_SPACE_RE = re.compile(r"[\"'\s]")
# Longest leading float literal, e.g. "2.809.51" -> "2.809", "12abc" -> "12".
_FLOAT_PREFIX_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def round_half_up(value: float, ndigits: int = 2) -> float:
    """Round *value* half-up (towards +inf) to *ndigits* decimals."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def try_parse_numeric(raw: object) -> tuple[float, bool]:
    """Parse *raw* into a 2-decimal float.

    Returns ``(value, parsed)``. ``parsed`` is False when the input could not
    be read as a number and the value fell back to ``0``.
    """
    if isinstance(raw, bool):
        return 0.0, False
    if isinstance(raw, Real):
        value = float(raw)
        if math.isnan(value) or math.isinf(value):
            return 0.0, False
        return round_half_up(value), True
    if not isinstance(raw, str):
        return 0.0, False

    token = _QUOTES_AND_SPACE_RE.sub("", raw)
    token = token.replace(",", ".", 1)
    match = _FLOAT_PREFIX_RE.match(token)
    if match is None:
        return 0.0, False
    value = float(match.group(0))
    if math.isinf(value):
        return 0.0, False
    return round_half_up(value), True


def parse_numeric_value(raw: object) -> float:
    """Parse *raw* as a number; unparseable input becomes ``0``."""
    value, _parsed = try_parse_numeric(raw)
    return value


def upper_text(value: Cell) -> Cell:
    """Uppercase string values; anything else passes through."""
    if isinstance(value, str):
        return value.upper()
    return value


def cell_text(value: Cell) -> str:
    """Text form of a cell: ``None`` is empty and integral floats drop ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_blank(value: Cell) -> bool:
    """True for absent cells and empty strings."""
    return value is None or value == ""
