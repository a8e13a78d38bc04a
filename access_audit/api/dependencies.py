"""FastAPI dependency injection: audit store, resource catalog, recorder, query/export services."""

import logging
from typing import Annotated

from fastapi import Depends, Request

from access_audit.application.audit_recorder import AuditEventRecorder
from access_audit.application.audit_store import AuditStore
from access_audit.application.export_service import AuditExportService
from access_audit.application.query_service import AuditQueryService
from access_audit.application.resource_catalog import InMemoryResourceCatalog, ResourceCatalog
from access_audit.config.settings import AppSettings, get_settings
from access_audit.core.context import org_id_ctx
from access_audit.infrastructure.database.audit_store_db import DbAuditStore
from access_audit.infrastructure.database.session import create_session_factory, get_engine
from access_audit.infrastructure.memory.audit_store_memory import InMemoryAuditStore
from access_audit.observability.metrics import MetricsCollector, metrics

_store: AuditStore | None = None
_catalog: ResourceCatalog | None = None
_recorder: AuditEventRecorder | None = None


def get_app_settings() -> AppSettings:
    return get_settings()


def get_metrics() -> MetricsCollector:
    return metrics


def get_audit_store() -> AuditStore:
    """Return the process-wide audit store, created once from settings."""
    global _store
    if _store is None:
        settings = get_settings()
        if settings.store_backend == "database":
            _store = DbAuditStore(create_session_factory(get_engine()))
        else:
            _store = InMemoryAuditStore()
    return _store


def get_resource_catalog() -> ResourceCatalog:
    """Return singleton resource catalog."""
    global _catalog
    if _catalog is None:
        _catalog = InMemoryResourceCatalog()
    return _catalog


def get_recorder(
    store: Annotated[AuditStore, Depends(get_audit_store)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    collector: Annotated[MetricsCollector, Depends(get_metrics)],
) -> AuditEventRecorder:
    """Return singleton recorder so scheduled writes can be drained at shutdown."""
    global _recorder
    if _recorder is None:
        _recorder = AuditEventRecorder(
            store=store,
            logger=logging.getLogger("access_audit.recorder"),
            metrics=collector if settings.enable_metrics else None,
        )
    return _recorder


def get_query_service(
    store: Annotated[AuditStore, Depends(get_audit_store)],
    catalog: Annotated[ResourceCatalog, Depends(get_resource_catalog)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    collector: Annotated[MetricsCollector, Depends(get_metrics)],
) -> AuditQueryService:
    return AuditQueryService(
        store=store,
        catalog=catalog,
        logger=logging.getLogger("access_audit.query"),
        timeout_seconds=settings.query_timeout_seconds,
        metrics=collector if settings.enable_metrics else None,
    )


def get_export_service(
    store: Annotated[AuditStore, Depends(get_audit_store)],
    catalog: Annotated[ResourceCatalog, Depends(get_resource_catalog)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> AuditExportService:
    return AuditExportService(
        store=store,
        catalog=catalog,
        logger=logging.getLogger("access_audit.export"),
        batch_size=settings.export_batch_size,
        timeout_seconds=settings.export_timeout_seconds,
    )


async def get_org_id(org_id: str, request: Request) -> str:
    """Org scope from the path; attached to request.state and logging context."""
    request.state.org_id = org_id
    org_id_ctx.set(org_id)
    return org_id


async def drain_pending_writes() -> None:
    """Await audit writes scheduled by the gateway route (called at shutdown)."""
    if _recorder is not None:
        await _recorder.drain()
