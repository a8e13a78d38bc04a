"""Audit store protocol. Application layer depends on this; infrastructure implements it."""

from typing import AsyncGenerator, List, Optional, Protocol, Tuple

from access_audit.domain.models.audit_event import AuditEvent
from access_audit.domain.models.query import AuditFilter, SortSpec, StoreFacets, TimeRange


class AuditStore(Protocol):
    """
    Append-only store for audit events. Must accept concurrent append calls.
    Rows are ordered by the sort key, ties broken by insertion sequence ascending.
    """

    async def append(self, event: AuditEvent) -> AuditEvent:
        """Persist one event and return it with its store-assigned id. Raises StorageError."""
        ...

    async def filtered_scan(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        sort: SortSpec,
        limit: Optional[int],
        offset: int = 0,
    ) -> Tuple[List[AuditEvent], int]:
        """Return (page of rows, total matching rows before paging). limit=None means unbounded."""
        ...

    def stream_scan(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        sort: SortSpec,
        batch_size: int,
    ) -> AsyncGenerator[AuditEvent, None]:
        """Yield every matching row in order without materializing the full result. Closed with aclose()."""
        ...

    async def facet_scan(self, org_id: Optional[str], time_range: TimeRange) -> StoreFacets:
        """Distinct actors, resource ids and locations within org and time range only."""
        ...
