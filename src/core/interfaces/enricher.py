"""Contrato del enriquecimiento de tenants."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import TenantMetadata


@runtime_checkable
class TenantEnricher(Protocol):
    """Obtiene metadatos descriptivos de un tenant.

    Nunca lanza: cualquier fallo se degrada a `None`.
    """

    async def enrich(self, tenant_id: str, token: str | None) -> TenantMetadata | None:
        ...
