"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los registros de salida son inmutables una vez emitidos (frozen).

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

TENANT_NOT_FOUND = "NOT_FOUND"


class ResolutionErrorKind(str, Enum):
    """Clasificación de los fallos de la sonda ARM."""

    NOT_FOUND = "not_found"
    HEADER_PARSE_FAILURE = "header_parse_failure"
    UNEXPECTED = "unexpected"


class ResolutionError(BaseModel):
    """Diagnóstico de una suscripción que no pudo resolverse a un tenant."""

    model_config = ConfigDict(frozen=True)

    kind: ResolutionErrorKind = Field(
        ...,
        description="Tipo de fallo (not_found / header_parse_failure / unexpected).",
    )
    detail: str | None = Field(
        default=None,
        description="Texto libre: status HTTP o mensaje del transporte.",
    )
    status_code: int | None = Field(
        default=None,
        description="Status HTTP de la sonda, si hubo respuesta.",
    )

    def describe(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


class TenantMetadata(BaseModel):
    """Metadatos descriptivos de un tenant (Microsoft Graph).

    Ausente (None) significa "no pedido" o "lookup fallido"; ambos se renderizan vacíos.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    display_name: str | None = Field(
        default=None,
        alias="displayName",
        description="Nombre visible del tenant.",
    )
    default_domain_name: str | None = Field(
        default=None,
        alias="defaultDomainName",
        description="Dominio por defecto (p.ej. contoso.onmicrosoft.com).",
    )

    def is_empty(self) -> bool:
        return not self.display_name and not self.default_domain_name


class OutcomeRecord(BaseModel):
    """Resultado terminal de una suscripción.

    Invariante:
    - `tenant_id == TENANT_NOT_FOUND` si y solo si `error` está presente.
    """

    model_config = ConfigDict(frozen=True)

    subscription_id: str = Field(
        ...,
        min_length=1,
        description="GUID canónico de la suscripción consultada.",
    )
    tenant_id: str = Field(
        default=TENANT_NOT_FOUND,
        min_length=1,
        description="Tenant propietario, o el centinela NOT_FOUND.",
    )
    metadata: TenantMetadata | None = Field(
        default=None,
        description="Metadatos del tenant (solo con enriquecimiento).",
    )
    error: ResolutionError | None = Field(
        default=None,
        description="Diagnóstico cuando la resolución falla.",
    )

    @model_validator(mode="after")
    def _check_sentinel(self) -> "OutcomeRecord":
        if (self.tenant_id == TENANT_NOT_FOUND) != (self.error is not None):
            raise ValueError("tenant_id must be NOT_FOUND exactly when an error is recorded")
        if self.error is not None and self.metadata is not None:
            raise ValueError("unresolved records cannot carry tenant metadata")
        return self

    @property
    def resolved(self) -> bool:
        return self.error is None

    @property
    def display_name(self) -> str | None:
        return self.metadata.display_name if self.metadata else None

    @property
    def default_domain_name(self) -> str | None:
        return self.metadata.default_domain_name if self.metadata else None


class ValidationRejection(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str = Field(..., description="Input original (sin recortar).")
    reason: str = Field(..., description="Motivo del rechazo.")


class LookupReport(BaseModel):
    """Agregado principal: un run completo del pipeline.

    Por qué un agregado:
    - Centraliza registros, rechazos y avisos para exportación y presentación.
    """

    records: list[OutcomeRecord] = Field(
        default_factory=list,
        description="Un registro por suscripción validada (orden de entrada).",
    )
    rejections: list[ValidationRejection] = Field(
        default_factory=list,
        description="Inputs descartados por el validador.",
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Avisos de modo degradado (p.ej. sin token de Graph).",
    )
    elapsed_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Tiempo de reloj de la fase de fan-out.",
    )
    enriched: bool = Field(
        default=False,
        description="Si se pidió enriquecimiento con Graph.",
    )

    @property
    def resolved(self) -> list[OutcomeRecord]:
        return [r for r in self.records if r.resolved]

    @property
    def errored(self) -> list[OutcomeRecord]:
        return [r for r in self.records if not r.resolved]
