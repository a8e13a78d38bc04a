"""Export assembler: streams every row matching a filter, ignoring pagination."""

import asyncio
import logging
import re
import time
from datetime import datetime
from typing import AsyncGenerator, AsyncIterator, Callable, List, Optional

from access_audit.application.audit_store import AuditStore
from access_audit.application.exceptions import QueryTimeoutError
from access_audit.application.query_service import enrich_rows
from access_audit.application.resource_catalog import ResourceCatalog
from access_audit.domain.models.audit_event import AuditEvent
from access_audit.domain.models.query import DEFAULT_SORT, AuditFilter, SortSpec, TimeRange
from access_audit.domain.schemas.audit_log import AuditLogRow

# Column order for downstream formatters (CSV header).
EXPORT_COLUMNS = (
    "id",
    "timestamp",
    "orgId",
    "action",
    "reason",
    "reasonLabel",
    "type",
    "resourceId",
    "resourceName",
    "resourceNiceId",
    "location",
    "actorType",
    "actor",
    "actorId",
    "method",
    "scheme",
    "host",
    "path",
    "originalRequestURL",
    "tls",
    "ip",
    "metadata",
)


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def export_filename(org_id: str, now: datetime) -> str:
    """Attachment name. Characters outside [A-Za-z0-9._-] in the org id become "_"."""
    safe_org = _UNSAFE_FILENAME_CHARS.sub("_", org_id)
    return f"access-audit-logs-{safe_org}-{int(now.timestamp())}.csv"


class AuditExportService:
    """
    Lazily yields rows in the query engine's ordering. Rows are pulled from the
    store in batches; only one batch is held in memory at a time. Restart by
    calling export() again with the same arguments.
    """

    def __init__(
        self,
        store: AuditStore,
        catalog: ResourceCatalog,
        logger: logging.Logger,
        batch_size: int = 500,
        timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._logger = logger
        self._batch_size = batch_size
        self._timeout = timeout_seconds
        self._clock = clock

    async def export(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        sort: SortSpec = DEFAULT_SORT,
    ) -> AsyncIterator[AuditLogRow]:
        deadline = None if self._timeout is None else self._clock() + self._timeout
        exported = 0
        batch: List[AuditEvent] = []
        self._logger.info("audit_export_started", extra={"org_id": audit_filter.org_id})

        scan = self._store.stream_scan(audit_filter, time_range, sort, self._batch_size)
        try:
            while True:
                try:
                    event = await self._next_event(scan, deadline)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError as e:
                    self._logger.error(
                        "audit_export_timeout",
                        extra={"org_id": audit_filter.org_id, "exported": exported},
                    )
                    raise QueryTimeoutError(f"Audit log export exceeded {self._timeout}s") from e
                batch.append(event)
                if len(batch) >= self._batch_size:
                    for row in await self._enrich(batch):
                        yield row
                    exported += len(batch)
                    batch = []
        finally:
            await scan.aclose()

        if batch:
            for row in await self._enrich(batch):
                yield row
            exported += len(batch)

        self._logger.info(
            "audit_export_completed",
            extra={"org_id": audit_filter.org_id, "exported": exported},
        )

    async def _next_event(self, scan: AsyncGenerator[AuditEvent, None], deadline: Optional[float]) -> AuditEvent:
        """Next row from the store scan, bounded by whatever is left of the deadline."""
        if deadline is None:
            return await scan.__anext__()
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        return await asyncio.wait_for(scan.__anext__(), remaining)

    async def _enrich(self, events: List[AuditEvent]) -> List[AuditLogRow]:
        resource_ids = {e.resource_id for e in events if e.resource_id is not None}
        resources = await self._catalog.resolve(resource_ids) if resource_ids else {}
        return enrich_rows(events, resources)
