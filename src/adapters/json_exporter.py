"""Exportación JSON del reporte.

Por qué JSON:
- Conserva los diagnósticos completos (tipo de error, status HTTP, rechazos)
  que el CSV no representa.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import LookupReport


def export_report_json(*, report: LookupReport, output_path: Path) -> Path:
    """Exporta `LookupReport` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    payload["summary"] = {
        "total": len(report.records),
        "resolved": len(report.resolved),
        "errored": len(report.errored),
        "rejected": len(report.rejections),
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
