"""Processing report persistence."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from planilla_processor import __version__
from planilla_processor.io import write_json
from planilla_processor.models import ProcessingResult
from planilla_processor.utils import utcnow_iso

REPORT_NAME = "processing_report.json"


def build_processing_report(
    results: Sequence[ProcessingResult], *, generated_at: str | None = None
) -> dict[str, object]:
    success = sum(1 for r in results if r.success)
    return {
        "tool": "planilla-processor",
        "version": __version__,
        "generated_at_utc": generated_at or utcnow_iso(),
        "total_files": len(results),
        "successful_files": success,
        "failed_files": len(results) - success,
        "results": [r.to_dict() for r in results],
    }


def write_processing_report(out_dir: Path, results: Sequence[ProcessingResult]) -> Path:
    """Write ``processing_report.json`` into *out_dir* and return the path."""
    return write_json(Path(out_dir) / REPORT_NAME, build_processing_report(results))
