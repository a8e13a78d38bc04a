# access_audit/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from access_audit.api import dependencies
from access_audit.api.middleware import CorrelationIdMiddleware, RequestLogMiddleware
from access_audit.api.routers import access_logs, gateway, health
from access_audit.application.exceptions import ApplicationError, QueryTimeoutError, StorageError
from access_audit.config.logging import configure_logging
from access_audit.config.settings import get_settings
from access_audit.domain.exceptions import DomainError, DomainValidationError
from access_audit.infrastructure.database.session import get_engine, init_models

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.store_backend == "database":
        await init_models(get_engine())
    yield
    await dependencies.drain_pending_writes()
    if settings.store_backend == "database":
        await get_engine().dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestLog.
app.add_middleware(RequestLogMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(StorageError)
async def storage_error_handler(request, exc: StorageError):
    logger.error("audit_storage_error", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=503, content={"detail": "Audit store unavailable; retry later"})


@app.exception_handler(QueryTimeoutError)
async def query_timeout_error_handler(request, exc: QueryTimeoutError):
    return JSONResponse(status_code=504, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /metrics, /logs/access (gateway), /org/{org_id}/logs/access[/export]
app.include_router(health.router)
app.include_router(gateway.router)
app.include_router(access_logs.router)
