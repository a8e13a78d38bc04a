# Application layer: services that orchestrate domain and the audit store.

from access_audit.application.audit_recorder import AuditEventRecorder
from access_audit.application.audit_store import AuditStore
from access_audit.application.exceptions import (
    ApplicationError,
    QueryTimeoutError,
    StorageError,
)
from access_audit.application.export_service import AuditExportService, export_filename
from access_audit.application.query_service import AuditQueryService
from access_audit.application.resource_catalog import InMemoryResourceCatalog, ResourceCatalog

__all__ = [
    "ApplicationError",
    "AuditEventRecorder",
    "AuditExportService",
    "AuditQueryService",
    "AuditStore",
    "InMemoryResourceCatalog",
    "QueryTimeoutError",
    "ResourceCatalog",
    "StorageError",
    "export_filename",
]
