"""Domain schemas. Request/response and validation."""

from access_audit.domain.schemas.audit_log import (
    AccessLogResponse,
    AuditLogRow,
    FilterAttributes,
    RecordAuditRequest,
)

__all__ = [
    "AccessLogResponse",
    "AuditLogRow",
    "FilterAttributes",
    "RecordAuditRequest",
]
