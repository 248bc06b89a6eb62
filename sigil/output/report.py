"""
Sigil Report Generator
=======================

Structured JSON reports built from :class:`~sigil.core.models.ImageSummary`
for machine consumption (CI checks, diffing two builds of a kernel).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sigil import __version__
from sigil.core.models import ImageSummary


class SigilReportGenerator:
    """Generate JSON reports from inspection results.

    Usage::

        generator = SigilReportGenerator()
        generator.generate_json(summary, "report.json")
    """

    def build(self, summary: ImageSummary) -> dict[str, Any]:
        """Assemble the report document for *summary*."""
        return {
            "report_type": "sigil_elf_inspection",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "image": summary.model_dump(mode="json"),
            "totals": {
                "sections": len(summary.sections),
                "segments": len(summary.segments),
                "loadable_segments": len(summary.load_plan),
                "memory_span": summary.memory_span,
                "warnings": len(summary.warnings),
            },
        }

    def to_json(self, summary: ImageSummary, indent: int = 2) -> str:
        return json.dumps(self.build(summary), indent=indent, ensure_ascii=False, default=str)

    def generate_json(self, summary: ImageSummary, output_path: str | Path) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.build(summary), f, indent=2, ensure_ascii=False, default=str)

        return str(path.resolve())
