"""Pydantic schemas for the access log API. Strict validation, no DB or infrastructure."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from access_audit.domain.models.audit_event import AuditEvent
from access_audit.domain.models.query import FacetSet
from access_audit.domain.reasons import describe_reason


# ---------------------------------------------------------------------------
# Recording (gateway -> audit)
# ---------------------------------------------------------------------------

class UserPayload(BaseModel):
    username: str = Field(..., min_length=1)
    userId: str = Field(..., min_length=1)


class ApiKeyPayload(BaseModel):
    name: Optional[str] = None
    apiKeyId: str = Field(..., min_length=1)


class DecisionPayload(BaseModel):
    """Decision as posted by the gateway."""

    action: bool
    reason: int
    resourceId: Optional[int] = None
    orgId: Optional[str] = None
    location: Optional[str] = None
    user: Optional[UserPayload] = None
    apiKey: Optional[ApiKeyPayload] = None
    metadata: Optional[Any] = None


class RequestPayload(BaseModel):
    """Request attributes as posted by the gateway."""

    path: str
    originalRequestURL: str
    scheme: str
    host: str
    method: str
    tls: bool
    requestIp: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    query: Optional[Dict[str, str]] = None


class RecordAuditRequest(BaseModel):
    decision: DecisionPayload
    request: RequestPayload


# ---------------------------------------------------------------------------
# Query / export (audit -> operator)
# ---------------------------------------------------------------------------

class AuditLogRow(BaseModel):
    """One audit event as presented to callers, enriched from the resource catalog."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    timestamp: int
    orgId: Optional[str] = None
    action: bool
    reason: int
    reasonLabel: str
    type: Optional[str] = None
    resourceId: Optional[int] = None
    resourceName: Optional[str] = None
    resourceNiceId: Optional[str] = None
    location: Optional[str] = None
    actorType: Optional[str] = None
    actor: Optional[str] = None
    actorId: Optional[str] = None
    metadata: Optional[str] = None
    originalRequestURL: str
    scheme: str
    host: str
    path: str
    method: str
    tls: bool
    ip: Optional[str] = None

    @classmethod
    def from_event(
        cls,
        event: AuditEvent,
        resource_name: Optional[str] = None,
        resource_nice_id: Optional[str] = None,
    ) -> "AuditLogRow":
        return cls(
            id=event.id,
            timestamp=event.timestamp,
            orgId=event.org_id,
            action=event.action,
            reason=event.reason,
            reasonLabel=describe_reason(event.reason),
            type=event.auth_type,
            resourceId=event.resource_id,
            resourceName=resource_name,
            resourceNiceId=resource_nice_id,
            location=event.location,
            actorType=event.actor_type,
            actor=event.actor,
            actorId=event.actor_id,
            metadata=event.metadata,
            originalRequestURL=event.original_request_url,
            scheme=event.scheme,
            host=event.host,
            path=event.path,
            method=event.method,
            tls=event.tls,
            ip=event.ip,
        )


class ResourceAttribute(BaseModel):
    id: int
    name: Optional[str] = None


class FilterAttributes(BaseModel):
    actors: List[str] = Field(default_factory=list)
    resources: List[ResourceAttribute] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)

    @classmethod
    def from_facets(cls, facets: FacetSet) -> "FilterAttributes":
        return cls(
            actors=list(facets.actors),
            resources=[ResourceAttribute(id=r.resource_id, name=r.resource_name) for r in facets.resources],
            locations=list(facets.locations),
        )


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class AccessLogData(BaseModel):
    log: List[AuditLogRow]
    pagination: Pagination
    filterAttributes: FilterAttributes


class AccessLogResponse(BaseModel):
    """Response schema for GET /org/{org_id}/logs/access."""

    data: AccessLogData
    success: bool = True
    message: str = "Access audit logs retrieved successfully"
