"""Validación de identificadores de suscripción.

Acepta GUIDs en forma canónica `8-4-4-4-12` (hex, mayúsculas o minúsculas),
opcionalmente entre llaves. Devuelve siempre la forma en minúsculas.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from core.domain.models import ValidationRejection
from core.errors import InvalidIdentifierError

_GUID_RE = re.compile(
    r"^\{?([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})\}?$",
    re.IGNORECASE,
)


@dataclass
class ValidationResult:
    identifiers: list[str] = field(default_factory=list)
    rejections: list[ValidationRejection] = field(default_factory=list)


def validate_identifier(raw: str) -> str:
    """Normaliza un GUID o lanza `InvalidIdentifierError`."""

    value = raw.strip()
    if not value:
        raise InvalidIdentifierError(raw, "empty")
    match = _GUID_RE.match(value)
    if not match:
        raise InvalidIdentifierError(raw)
    # Llaves desbalanceadas: "{guid" o "guid}".
    if value.startswith("{") != value.endswith("}"):
        raise InvalidIdentifierError(raw, "unbalanced braces")
    return match.group(1).lower()


def validate_identifiers(raws: Iterable[str]) -> ValidationResult:
    """Filtra inputs crudos; nunca falla el lote.

    - Vacíos/espacios: se descartan en silencio.
    - Mal formados: un `ValidationRejection` por input.
    - Duplicados: se conserva la primera aparición.
    """

    result = ValidationResult()
    seen: set[str] = set()
    for raw in raws:
        if not raw or not raw.strip():
            continue
        try:
            identifier = validate_identifier(raw)
        except InvalidIdentifierError as exc:
            logger.warning("Skipping invalid subscription id {!r}: {}", raw, exc.reason)
            result.rejections.append(ValidationRejection(raw=raw, reason=exc.reason))
            continue
        if identifier in seen:
            continue
        seen.add(identifier)
        result.identifiers.append(identifier)
    return result
