"""Shared header matching and timestamp helpers."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Sequence
from datetime import datetime, timezone


def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


# ── Header matching ─────────────────────────────────────────────


def normalize_header(name: object) -> str:
    """Casefold *name*, strip accents and collapse whitespace."""
    if name is None:
        return ""
    text = unicodedata.normalize("NFKD", str(name))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", text).strip().casefold()


def header_matches(header: object, *fragments: str) -> bool:
    """Return True when every fragment occurs in *header*.

    This is the one place where header text is compared. Matching is a
    plain substring test after :func:`normalize_header`, so it is lenient:
    ``"Nombre Fantasia"`` matches ``"nombre"``.
    """
    if not fragments:
        return False
    text = normalize_header(header)
    return all(normalize_header(fragment) in text for fragment in fragments)


def find_column(
    headers: Sequence[object],
    *fragments: str,
    exclude: Sequence[str] = (),
) -> int:
    """Return the index of the first header matching *fragments*, or ``-1``.

    Headers containing any of the *exclude* fragments are skipped.
    """
    for idx, header in enumerate(headers):
        if not header_matches(header, *fragments):
            continue
        if any(header_matches(header, ex) for ex in exclude):
            continue
        return idx
    return -1


def column_present(headers: Sequence[object], required: str) -> bool:
    """True if some header contains every word of the *required* column name."""
    words = normalize_header(required).split()
    return any(header_matches(header, *words) for header in headers)
