# access_audit/api/routers/health.py

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from access_audit.api.dependencies import get_metrics
from access_audit.config.settings import get_settings
from access_audit.observability.metrics import MetricsCollector

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Health check with correlation ID from request state."""
    settings = get_settings()
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
        "store_backend": settings.store_backend,
    }


@router.get("/metrics")
async def export_metrics(collector: Annotated[MetricsCollector, Depends(get_metrics)]):
    return collector.export_metrics()
