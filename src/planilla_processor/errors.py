"""Per-file processing errors.

All of these are caught at the orchestrator boundary and turned into a
failed :class:`~planilla_processor.models.ProcessingResult`.
"""

from __future__ import annotations

from collections.abc import Sequence


class ProcessingError(ValueError):
    """Base class for errors that fail a single input file."""

    def errors(self) -> list[str]:
        return [str(self)]


class FormatError(ProcessingError):
    """The file extension is not a supported spreadsheet type."""


class MissingWorksheetError(ProcessingError):
    """One or more required worksheets are absent."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Faltan hojas requeridas: {', '.join(self.missing)}")

    def errors(self) -> list[str]:
        return [f"Falta la hoja: {name}" for name in self.missing]


class MissingAnchorColumnError(ProcessingError):
    """A positional column insertion could not find its anchor column."""

    def __init__(self, sheet: str, column: str, anchor: str) -> None:
        self.sheet = sheet
        self.column = column
        self.anchor = anchor
        super().__init__(
            f'No se puede insertar la columna "{column}" en la hoja {sheet}: '
            f'no se encontró la columna "{anchor}"'
        )


class MissingColumnError(ProcessingError):
    """A column the rule engine depends on could not be resolved."""

    def __init__(self, sheet: str, column: str) -> None:
        self.sheet = sheet
        self.column = column
        super().__init__(f'Columna "{column}" no encontrada en la hoja {sheet}')
