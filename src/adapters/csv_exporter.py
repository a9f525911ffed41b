"""Exportación CSV de los registros.

Formato:
- Cabecera `SubscriptionId,TenantId,DisplayName,DefaultDomainName`.
- Suscripciones sin resolver llevan el centinela `NOT_FOUND` en TenantId.
- Metadatos ausentes se escriben como celdas vacías.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from core.domain.models import OutcomeRecord

CSV_HEADER = ("SubscriptionId", "TenantId", "DisplayName", "DefaultDomainName")


def record_to_row(record: OutcomeRecord) -> tuple[str, str, str, str]:
    return (
        record.subscription_id,
        record.tenant_id,
        record.display_name or "",
        record.default_domain_name or "",
    )


def export_records_csv(*, records: Iterable[OutcomeRecord], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(CSV_HEADER)
        for record in records:
            writer.writerow(record_to_row(record))
    return output_path
