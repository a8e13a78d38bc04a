"""Query/filter/pagination engine over the audit store. Read-only; retry-safe."""

import asyncio
import logging
import time
from typing import Dict, Iterable, List, Optional

from access_audit.application.audit_store import AuditStore
from access_audit.application.exceptions import QueryTimeoutError
from access_audit.application.resource_catalog import ResourceCatalog
from access_audit.domain.models.audit_event import AuditEvent
from access_audit.domain.models.query import (
    DEFAULT_SORT,
    AuditFilter,
    FacetSet,
    PageRequest,
    QueryResult,
    ResourceFacet,
    ResourceRef,
    SortSpec,
    StoreFacets,
    TimeRange,
)
from access_audit.domain.schemas.audit_log import AuditLogRow
from access_audit.observability.metrics import MetricsCollector

METRIC_QUERY_LATENCY = "audit_query_latency_ms"


def enrich_rows(events: Iterable[AuditEvent], resources: Dict[int, ResourceRef]) -> List[AuditLogRow]:
    rows = []
    for event in events:
        ref = resources.get(event.resource_id) if event.resource_id is not None else None
        rows.append(
            AuditLogRow.from_event(
                event,
                resource_name=ref.name if ref else None,
                resource_nice_id=ref.nice_id if ref else None,
            )
        )
    return rows


class AuditQueryService:
    """
    Serves filtered, paginated, sortable views plus facets.

    total_count reflects filter + time range before paging. Facets are keyed to
    org and time range only so that selecting one filter never hides the options
    of the others.
    """

    def __init__(
        self,
        store: AuditStore,
        catalog: ResourceCatalog,
        logger: logging.Logger,
        timeout_seconds: Optional[float] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._logger = logger
        self._timeout = timeout_seconds
        self._metrics = metrics

    async def query(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        page: PageRequest,
        sort: SortSpec = DEFAULT_SORT,
    ) -> QueryResult:
        started = time.monotonic()
        try:
            result = await asyncio.wait_for(
                self._query(audit_filter, time_range, page, sort),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            self._logger.error(
                "audit_query_timeout",
                extra={"org_id": audit_filter.org_id, "timeout_seconds": self._timeout},
            )
            raise QueryTimeoutError(f"Audit log query exceeded {self._timeout}s") from e

        elapsed_ms = (time.monotonic() - started) * 1000
        if self._metrics is not None:
            self._metrics.observe_latency(METRIC_QUERY_LATENCY, elapsed_ms)
        self._logger.info(
            "audit_query",
            extra={
                "org_id": audit_filter.org_id,
                "total_count": result.total_count,
                "returned": len(result.rows),
                "limit": page.limit,
                "offset": page.offset,
                "latency_ms": round(elapsed_ms, 2),
            },
        )
        return result

    async def _query(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        page: PageRequest,
        sort: SortSpec,
    ) -> QueryResult:
        events, total = await self._store.filtered_scan(
            audit_filter, time_range, sort, page.limit, page.offset
        )
        store_facets = await self._store.facet_scan(audit_filter.org_id, time_range)

        resource_ids = {e.resource_id for e in events if e.resource_id is not None}
        resource_ids.update(store_facets.resource_ids)
        resources = await self._catalog.resolve(resource_ids) if resource_ids else {}

        return QueryResult(
            rows=tuple(enrich_rows(events, resources)),
            total_count=total,
            facets=self._build_facets(store_facets, resources),
        )

    @staticmethod
    def _build_facets(store_facets: StoreFacets, resources: Dict[int, ResourceRef]) -> FacetSet:
        return FacetSet(
            actors=tuple(sorted(set(store_facets.actors))),
            resources=tuple(
                ResourceFacet(
                    resource_id=rid,
                    resource_name=resources[rid].name if rid in resources else None,
                )
                for rid in sorted(set(store_facets.resource_ids))
            ),
            locations=tuple(sorted(set(store_facets.locations))),
        )
