"""Domain models. Pure business entities."""

from access_audit.domain.models.audit_event import (
    ActorIdentity,
    ApiKeyActor,
    AuditEvent,
    Decision,
    RequestContext,
    UserActor,
)
from access_audit.domain.models.query import (
    DEFAULT_SORT,
    AuditFilter,
    AuthMethodType,
    FacetSet,
    PageRequest,
    QueryResult,
    ResourceFacet,
    ResourceRef,
    SortField,
    SortSpec,
    StoreFacets,
    TimeRange,
)

__all__ = [
    "ActorIdentity",
    "ApiKeyActor",
    "AuditEvent",
    "AuditFilter",
    "AuthMethodType",
    "DEFAULT_SORT",
    "Decision",
    "FacetSet",
    "PageRequest",
    "QueryResult",
    "RequestContext",
    "ResourceFacet",
    "ResourceRef",
    "SortField",
    "SortSpec",
    "StoreFacets",
    "TimeRange",
    "UserActor",
]
