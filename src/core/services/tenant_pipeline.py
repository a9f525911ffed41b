"""Subscription-to-tenant lookup orchestration.

This module owns the whole run: input validation, the single Graph token
acquisition, the bounded fan-out over subscriptions and the final
aggregation. The CLI delegates to these helpers and only handles printing,
which keeps side-effects (progress bars, tables) out of the core logic and
makes the pipeline reusable from tests or other entry-points.

Records are returned in input order; the progress hook fires in completion
order.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Sequence

import httpx
from loguru import logger
from pydantic import ValidationError

from adapters.arm_probe import ArmChallengeResolver
from adapters.credentials import build_credential_provider
from adapters.graph_enricher import GraphTenantEnricher
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.identifiers import validate_identifiers
from core.domain.models import (
    TENANT_NOT_FOUND,
    LookupReport,
    OutcomeRecord,
    ResolutionError,
    ResolutionErrorKind,
    ValidationRejection,
)
from core.errors import FanOutUnavailableError, ResolutionFailed
from core.interfaces.credentials import CredentialProvider
from core.interfaces.enricher import TenantEnricher
from core.interfaces.resolver import TenantResolver

NO_TOKEN_WARNING = "Graph token unavailable; continuing without tenant enrichment."


@dataclass
class LookupRequest:
    """Parameters that control one pipeline run."""

    subscription_ids: Sequence[str] = ()
    enrich: bool = False
    max_concurrency: int | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    rejected: Callable[[ValidationRejection], None] | None = None
    lookup_start: Callable[[int], None] | None = None
    lookup_progress: Callable[[OutcomeRecord], None] | None = None


def _require_positive_concurrency(max_concurrency: int) -> None:
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1 (got {max_concurrency})")


async def lookup_one(
    subscription_id: str,
    *,
    resolver: TenantResolver,
    enricher: TenantEnricher | None = None,
    token: str | None = None,
) -> OutcomeRecord:
    """Resolve (and optionally enrich) one subscription.

    Never raises for per-item failures: every outcome becomes a record. The
    token is received by value so workers never read shared mutable state.
    """

    try:
        tenant_id = await resolver.resolve(subscription_id)
    except ResolutionFailed as exc:
        return OutcomeRecord(subscription_id=subscription_id, error=exc.error)
    except Exception as exc:
        logger.warning("Resolver crashed for {}: {!r}", subscription_id, exc)
        error = ResolutionError(
            kind=ResolutionErrorKind.UNEXPECTED,
            detail=str(exc) or exc.__class__.__name__,
        )
        return OutcomeRecord(subscription_id=subscription_id, error=error)

    if not tenant_id or tenant_id == TENANT_NOT_FOUND:
        error = ResolutionError(
            kind=ResolutionErrorKind.HEADER_PARSE_FAILURE,
            detail=f"unusable tenant segment {tenant_id!r}",
        )
        return OutcomeRecord(subscription_id=subscription_id, error=error)

    metadata = None
    if enricher is not None and token:
        try:
            metadata = await enricher.enrich(tenant_id, token)
        except Exception as exc:
            logger.debug("Enrichment failed for tenant {}: {!r}", tenant_id, exc)
            metadata = None

    try:
        return OutcomeRecord(subscription_id=subscription_id, tenant_id=tenant_id, metadata=metadata)
    except ValidationError as exc:
        logger.warning("Discarding invalid outcome for {}: {}", subscription_id, exc)
        error = ResolutionError(kind=ResolutionErrorKind.UNEXPECTED, detail="invalid outcome record")
        return OutcomeRecord(subscription_id=subscription_id, error=error)


async def fan_out(
    subscription_ids: Sequence[str],
    *,
    resolver: TenantResolver,
    enricher: TenantEnricher | None,
    token: str | None,
    max_concurrency: int,
    on_complete: Callable[[OutcomeRecord], None] | None = None,
) -> list[OutcomeRecord]:
    """Run `lookup_one` over every id with at most `max_concurrency` in flight.

    `max_concurrency=1` is the sequential mode; there is no second code path.
    """

    _require_positive_concurrency(max_concurrency)
    sem = asyncio.Semaphore(max_concurrency)

    async def run_one(subscription_id: str, worker_token: str | None) -> OutcomeRecord:
        async with sem:
            record = await lookup_one(
                subscription_id,
                resolver=resolver,
                enricher=enricher,
                token=worker_token,
            )
        if on_complete:
            try:
                on_complete(record)
            except Exception as exc:
                logger.warning("Progress hook failed for {}: {!r}", subscription_id, exc)
        return record

    return list(await asyncio.gather(*(run_one(sid, token) for sid in subscription_ids)))


def build_report(
    *,
    records: Sequence[OutcomeRecord],
    rejections: Sequence[ValidationRejection],
    warnings: Sequence[str],
    elapsed_seconds: float,
    enriched: bool,
) -> LookupReport:
    return LookupReport(
        records=list(records),
        rejections=list(rejections),
        warnings=list(warnings),
        elapsed_seconds=max(0.0, elapsed_seconds),
        enriched=enriched,
    )


async def _acquire_token(
    provider: CredentialProvider,
    *,
    warnings: list[str],
    hooks: PipelineHooks,
) -> str | None:
    try:
        token = await provider.get_token()
    except Exception as exc:
        logger.warning("Credential provider failed: {!r}", exc)
        token = None
    if not token:
        warnings.append(NO_TOKEN_WARNING)
        if hooks.warning:
            hooks.warning(NO_TOKEN_WARNING)
        return None
    return token


async def lookup(
    *,
    settings: AppSettings,
    request: LookupRequest,
    hooks: PipelineHooks | None = None,
    resolver: TenantResolver | None = None,
    enricher: TenantEnricher | None = None,
    credential_provider: CredentialProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LookupReport:
    hooks = hooks or PipelineHooks()
    warnings: list[str] = []

    max_concurrency = (
        settings.max_concurrency if request.max_concurrency is None else request.max_concurrency
    )
    _require_positive_concurrency(max_concurrency)

    validated = validate_identifiers(request.subscription_ids)
    if hooks.rejected:
        for rejection in validated.rejections:
            hooks.rejected(rejection)

    async with build_async_client(settings, transport=transport) as client:
        resolver = resolver or ArmChallengeResolver(client, settings)

        token: str | None = None
        if request.enrich:
            enricher = enricher or GraphTenantEnricher(client, settings)
            provider = credential_provider or build_credential_provider(settings)
            token = await _acquire_token(provider, warnings=warnings, hooks=hooks)
        else:
            enricher = None

        if hooks.lookup_start:
            hooks.lookup_start(len(validated.identifiers))

        logger.debug(
            "Looking up {} subscriptions (concurrency={}, enrich={})",
            len(validated.identifiers),
            max_concurrency,
            request.enrich,
        )
        started = time.perf_counter()
        records = await fan_out(
            validated.identifiers,
            resolver=resolver,
            enricher=enricher,
            token=token,
            max_concurrency=max_concurrency,
            on_complete=hooks.lookup_progress,
        )
        elapsed = time.perf_counter() - started

    logger.debug("Fan-out finished in {:.2f}s", elapsed)
    return build_report(
        records=records,
        rejections=validated.rejections,
        warnings=warnings,
        elapsed_seconds=elapsed,
        enriched=request.enrich,
    )


def ensure_fanout_available() -> None:
    """Fail fast when a new event loop cannot be started from this thread."""

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return
    raise FanOutUnavailableError(
        "run_lookup() cannot start the async fan-out from inside a running event loop; "
        "await lookup() instead."
    )


def run_lookup(
    *,
    settings: AppSettings,
    request: LookupRequest,
    hooks: PipelineHooks | None = None,
    **kwargs: object,
) -> LookupReport:
    """Synchronous entry-point used by the CLI."""

    ensure_fanout_available()
    return asyncio.run(lookup(settings=settings, request=request, hooks=hooks, **kwargs))  # type: ignore[arg-type]
