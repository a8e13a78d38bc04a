"""In-memory audit store. Reference implementation of the AuditStore protocol for tests and local runs."""

import asyncio
from dataclasses import replace
from typing import Any, AsyncGenerator, List, Optional, Tuple

from access_audit.domain.models.audit_event import AuditEvent
from access_audit.domain.models.query import AuditFilter, SortSpec, StoreFacets, TimeRange


def _matches(event: AuditEvent, audit_filter: AuditFilter, time_range: TimeRange) -> bool:
    if audit_filter.org_id is not None and event.org_id != audit_filter.org_id:
        return False
    if not time_range.contains(event.timestamp):
        return False
    if audit_filter.action is not None and event.action != audit_filter.action:
        return False
    if audit_filter.auth_type is not None and event.auth_type != audit_filter.auth_type.value:
        return False
    if audit_filter.resource_id is not None and event.resource_id != audit_filter.resource_id:
        return False
    if audit_filter.location is not None and event.location != audit_filter.location:
        return False
    if audit_filter.actor is not None and event.actor != audit_filter.actor:
        return False
    return True


def _sort_key(event: AuditEvent, sort: SortSpec) -> Tuple[bool, Any]:
    value = getattr(event, sort.field.attribute)
    # NULLs sort last ascending, first descending (PostgreSQL default)
    return (value is None, value if value is not None else 0)


class InMemoryAuditStore:
    """
    Append-only list guarded by an asyncio.Lock. Ids are assigned 1, 2, 3, ... in
    append order and break sort ties.
    """

    def __init__(self) -> None:
        self._events: List[AuditEvent] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._events)

    async def append(self, event: AuditEvent) -> AuditEvent:
        async with self._lock:
            stored = replace(event, id=len(self._events) + 1)
            self._events.append(stored)
        return stored

    def _select(self, audit_filter: AuditFilter, time_range: TimeRange, sort: SortSpec) -> List[AuditEvent]:
        # _events is already in id order; sorted() is stable, so ties keep insertion order.
        matched = [e for e in self._events if _matches(e, audit_filter, time_range)]
        return sorted(matched, key=lambda e: _sort_key(e, sort), reverse=sort.descending)

    async def filtered_scan(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        sort: SortSpec,
        limit: Optional[int],
        offset: int = 0,
    ) -> Tuple[List[AuditEvent], int]:
        rows = self._select(audit_filter, time_range, sort)
        end = None if limit is None else offset + limit
        return rows[offset:end], len(rows)

    async def stream_scan(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        sort: SortSpec,
        batch_size: int,
    ) -> AsyncGenerator[AuditEvent, None]:
        rows = self._select(audit_filter, time_range, sort)
        for start in range(0, len(rows), batch_size):
            for event in rows[start:start + batch_size]:
                yield event
            # yield control between batches so long exports stay cancellable
            await asyncio.sleep(0)

    async def facet_scan(self, org_id: Optional[str], time_range: TimeRange) -> StoreFacets:
        scoped = [e for e in self._events if _matches(e, AuditFilter(org_id=org_id), time_range)]
        return StoreFacets(
            actors=tuple(sorted({e.actor for e in scoped if e.actor is not None})),
            resource_ids=tuple(sorted({e.resource_id for e in scoped if e.resource_id is not None})),
            locations=tuple(sorted({e.location for e in scoped if e.location is not None})),
        )
