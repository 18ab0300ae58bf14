"""
Kestrel Report Generator
=========================

Writes :class:`~kestrel.core.models.ImageReport` objects as JSON, either
to a file or to a string for stdout.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from kestrel import __version__
from kestrel.core.models import ImageReport


class KestrelReportGenerator:
    """Generate structured JSON reports.

    Usage::

        gen = KestrelReportGenerator()
        gen.generate_json(report, "out/ls.json")
    """

    def build(self, report: ImageReport) -> dict[str, Any]:
        """Wrap *report* in the report envelope."""
        return {
            "report_type": "kestrel_elf_structure",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "image": report.model_dump(mode="json"),
        }

    def render_json(self, report: ImageReport, indent: int = 2) -> str:
        """Return the JSON report as a string."""
        return json.dumps(self.build(report), indent=indent, ensure_ascii=False)

    def generate_json(self, report: ImageReport, output_path: str | Path) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render_json(report), encoding="utf-8")
        return str(path.resolve())
