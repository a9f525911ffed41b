"""Excepciones del Core.

Reglas:
- Los adaptadores lanzan estas excepciones; el pipeline las convierte en
  registros por suscripción.
- Solo `FanOutUnavailableError` (y errores de configuración) llegan a la CLI
  como fallo del run completo.
"""

from __future__ import annotations

from core.domain.models import ResolutionError, ResolutionErrorKind


class Sub2TenantError(Exception):
    """Base de todas las excepciones propias."""


class InvalidIdentifierError(Sub2TenantError, ValueError):
    """El input no es un GUID de suscripción bien formado."""

    def __init__(self, raw: str, reason: str = "not a canonical GUID") -> None:
        super().__init__(f"{raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class ResolutionFailed(Sub2TenantError):
    """La sonda ARM no produjo un tenant; lleva el `ResolutionError` clasificado."""

    def __init__(self, error: ResolutionError) -> None:
        super().__init__(error.describe())
        self.error = error

    @classmethod
    def of(
        cls,
        kind: ResolutionErrorKind,
        detail: str | None = None,
        *,
        status_code: int | None = None,
    ) -> "ResolutionFailed":
        return cls(ResolutionError(kind=kind, detail=detail, status_code=status_code))


class FanOutUnavailableError(Sub2TenantError, RuntimeError):
    """No se puede arrancar el fan-out concurrente (no hay fallback secuencial)."""
