"""Condicion IVA text -> numeric code mapping.

The table is an ordered sequence of ``(label, code)`` pairs. Lookup runs an
ordered list of match tiers (exact, substring, first word); the first tier
that matches wins, and within a tier the first table entry wins.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from planilla_processor import SN
from planilla_processor.models import Cell

ConditionTable = Sequence[tuple[str, int]]
MatchTier = Callable[[str, str], bool]

DEFAULT_CONDITION_CODES: tuple[tuple[str, int], ...] = (
    ("Responsable Inscripto", 1),
    ("Responsable No Inscripto", 2),
    ("No Responsable", 3),
    ("Exento", 4),
    ("Consumidor Final", 5),
    ("Monotributista", 6),
)


# ── Match tiers ─────────────────────────────────────────────────
# Each tier receives the lowercased text and the lowercased label.


def match_exact(text: str, label: str) -> bool:
    return text == label


def match_substring(text: str, label: str) -> bool:
    return label in text or text in label


def match_first_word(text: str, label: str) -> bool:
    first_word = label.split(" ")[0]
    return first_word in text or text in first_word


MATCH_TIERS: tuple[MatchTier, ...] = (match_exact, match_substring, match_first_word)


def lookup_condition_code(
    text: str,
    table: ConditionTable = DEFAULT_CONDITION_CODES,
    tiers: Sequence[MatchTier] = MATCH_TIERS,
) -> int | None:
    """Return the code for *text*, or ``None`` when no tier matches."""
    lowered = text.strip().lower()
    if not lowered:
        return None
    for tier in tiers:
        for label, code in table:
            if tier(lowered, label.lower()):
                return code
    return None


def map_condition_to_code(
    value: Cell, table: ConditionTable = DEFAULT_CONDITION_CODES
) -> Cell:
    """Map a Condicion IVA cell to its code.

    Numbers pass through, ``""`` and ``"SN"`` are returned as-is, and text
    with no match comes back trimmed.
    """
    if value is None:
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if not text or text == SN:
        return text
    code = lookup_condition_code(text, table)
    return text if code is None else code


def load_condition_table(path: Path) -> tuple[tuple[str, int], ...]:
    """Read ``Label=code`` lines from *path* into a condition table.

    Blank lines and ``#`` comments are skipped. Raises ``ValueError`` for
    unreadable files or malformed lines.
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Condition table not found: {path} (expected lines like Exento=4)")
    if path.is_dir():
        raise ValueError(f"Condition table is a directory, not a file: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read condition table {path}: {exc}") from exc

    table: list[tuple[str, int]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            raise ValueError(f"{path}:{lineno}: expected Label=code, got {stripped!r}")
        label, raw_code = (part.strip() for part in stripped.rsplit("=", 1))
        if not label:
            raise ValueError(f"{path}:{lineno}: empty label")
        try:
            code = int(raw_code)
        except ValueError as exc:
            raise ValueError(f"{path}:{lineno}: code must be an integer, got {raw_code!r}") from exc
        table.append((label, code))
    if not table:
        raise ValueError(f"Condition table {path} has no entries")
    return tuple(table)
