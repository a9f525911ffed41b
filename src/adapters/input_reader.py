"""Lectura de suscripciones desde fichero o stdin.

Soporta:
- Texto plano: un id por línea (`#` = comentario, líneas vacías ignoradas).
- CSV con cabecera que incluya una columna `SubscriptionId` (p.ej. un export
  previo de esta herramienta).

El validador decide qué es un GUID válido; aquí solo se extraen candidatos.
"""

from __future__ import annotations

import csv
import io
import sys
from pathlib import Path
from typing import TextIO

_ID_COLUMNS = ("subscriptionid", "subscription_id", "subscription id", "id")


def _find_id_column(header: list[str]) -> int | None:
    normalized = [cell.strip().lower() for cell in header]
    for name in _ID_COLUMNS:
        if name in normalized:
            return normalized.index(name)
    return None


def parse_subscription_lines(text: str) -> list[str]:
    lines = text.splitlines()
    first = next((line for line in lines if line.strip() and not line.lstrip().startswith("#")), None)
    if first is not None and "," in first:
        rows = list(csv.reader(io.StringIO(text)))
        rows = [row for row in rows if row and not row[0].lstrip().startswith("#")]
        column = _find_id_column(rows[0]) if rows else None
        if column is not None:
            return [row[column] for row in rows[1:] if len(row) > column]

    out: list[str] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        out.append(stripped)
    return out


def read_subscription_ids(path: Path | str, *, stdin: TextIO | None = None) -> list[str]:
    """Lee ids desde `path` (`-` = stdin)."""

    if str(path) == "-":
        stream = stdin or sys.stdin
        return parse_subscription_lines(stream.read())
    return parse_subscription_lines(Path(path).read_text(encoding="utf-8-sig"))
