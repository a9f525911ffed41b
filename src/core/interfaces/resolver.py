"""Contrato del resolvedor suscripción -> tenant."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TenantResolver(Protocol):
    """Contrato mínimo para resolver el tenant propietario.

    Reglas de diseño:
    - `resolve` es asíncrono porque hace I/O (HTTP).
    - Devuelve el tenant id o lanza `core.errors.ResolutionFailed` con el
      fallo ya clasificado. Sin reintentos.
    """

    async def resolve(self, subscription_id: str) -> str:
        ...
