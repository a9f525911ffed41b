"""Enriquecimiento de tenants vía Microsoft Graph.

Endpoint:
- `GET /v1.0/tenantRelationships/findTenantInformationByTenantId(tenantId='<id>')`
- Requiere un bearer token con audiencia Graph (compartido por todo el run).

Cualquier fallo (red, 4xx/5xx, JSON inválido, token ausente) degrada a `None`:
el registro conserva su tenant id, solo sin nombre/dominio.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import ValidationError

from core.config import AppSettings
from core.domain.models import TenantMetadata
from core.interfaces.enricher import TenantEnricher


class GraphTenantEnricher(TenantEnricher):
    def __init__(self, client: httpx.AsyncClient, settings: AppSettings | None = None) -> None:
        self._client = client
        self._settings = settings or AppSettings()

    def lookup_url(self, tenant_id: str) -> str:
        # Comillas simples dentro del literal OData se escapan duplicándolas.
        literal = quote(tenant_id.replace("'", "''"), safe="")
        return (
            f"{self._settings.graph_base_url}/v1.0/tenantRelationships/"
            f"findTenantInformationByTenantId(tenantId='{literal}')"
        )

    async def enrich(self, tenant_id: str, token: str | None) -> TenantMetadata | None:
        if not token:
            return None

        try:
            resp = await self._client.get(
                self.lookup_url(tenant_id),
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.debug("Graph lookup failed for tenant {}: {!r}", tenant_id, exc)
            return None

        if not resp.is_success:
            logger.debug("Graph lookup for tenant {} -> HTTP {}", tenant_id, resp.status_code)
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.debug("Graph lookup for tenant {} returned a non-JSON body", tenant_id)
            return None
        if not isinstance(data, dict):
            return None

        try:
            metadata = TenantMetadata.model_validate(data)
        except ValidationError as exc:
            logger.debug("Graph payload for tenant {} rejected: {}", tenant_id, exc)
            return None
        if metadata.is_empty():
            return None
        return metadata
