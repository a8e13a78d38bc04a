"""Access log API router: GET /org/{org_id}/logs/access (paged query), GET .../export (CSV stream)."""

import csv
import io
from datetime import datetime, timezone
from typing import Annotated, AsyncIterator, Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from access_audit.api.dependencies import (
    get_app_settings,
    get_export_service,
    get_org_id,
    get_query_service,
)
from access_audit.application.export_service import EXPORT_COLUMNS, AuditExportService, export_filename
from access_audit.application.query_service import AuditQueryService
from access_audit.config.settings import AppSettings
from access_audit.domain.models.query import AuditFilter, PageRequest, SortField, SortSpec, TimeRange
from access_audit.domain.schemas.audit_log import (
    AccessLogData,
    AccessLogResponse,
    AuditLogRow,
    FilterAttributes,
    Pagination,
)
from access_audit.domain.validators.audit_validator import build_audit_filter, parse_time_bound

router = APIRouter()


class _FilterParams:
    """Query-string filter and time parameters shared by the query and export routes."""

    def __init__(
        self,
        timeStart: Annotated[Optional[str], Query(description="ISO-8601 instant or date")] = None,
        timeEnd: Annotated[Optional[str], Query(description="ISO-8601 instant or date; bare date means today's time of day")] = None,
        action: Optional[bool] = None,
        type: Annotated[Optional[str], Query(description="password | pincode | login | whitelistedEmail")] = None,
        resourceId: Optional[int] = None,
        location: Optional[str] = None,
        actor: Optional[str] = None,
        sortBy: SortField = SortField.TIMESTAMP,
        order: Literal["asc", "desc"] = "asc",
    ) -> None:
        self.time_start = timeStart
        self.time_end = timeEnd
        self.action = action
        self.auth_type = type
        self.resource_id = resourceId
        self.location = location
        self.actor = actor
        self.sort = SortSpec(field=sortBy, descending=order == "desc")

    def audit_filter(self, org_id: str) -> AuditFilter:
        return build_audit_filter(
            org_id=org_id,
            action=self.action,
            auth_type=self.auth_type,
            resource_id=self.resource_id,
            location=self.location,
            actor=self.actor,
        )

    def time_range(self, now: datetime, lookback_days: int) -> TimeRange:
        return TimeRange.from_params(
            parse_time_bound("timeStart", self.time_start),
            parse_time_bound("timeEnd", self.time_end),
            now=now,
            lookback_days=lookback_days,
        )


@router.get("/org/{org_id}/logs/access", response_model=AccessLogResponse)
async def query_access_logs(
    params: Annotated[_FilterParams, Depends()],
    limit: Annotated[Optional[int], Query(ge=1)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    org_id: Annotated[str, Depends(get_org_id)] = ...,
    settings: Annotated[AppSettings, Depends(get_app_settings)] = ...,
    query_service: Annotated[AuditQueryService, Depends(get_query_service)] = ...,
):
    """Filtered, paginated access log with filter attributes (facets) for the time range."""
    now = datetime.now(timezone.utc)
    audit_filter = params.audit_filter(org_id)
    time_range = params.time_range(now, settings.default_lookback_days)
    page = PageRequest.clamped(
        limit, offset, default=settings.default_page_size, maximum=settings.max_page_size
    )
    result = await query_service.query(audit_filter, time_range, page, params.sort)
    return AccessLogResponse(
        data=AccessLogData(
            log=list(result.rows),
            pagination=Pagination(total=result.total_count, limit=page.limit, offset=page.offset),
            filterAttributes=FilterAttributes.from_facets(result.facets),
        )
    )


def _csv_line(values) -> str:
    buffer = io.StringIO()
    csv.writer(buffer).writerow(values)
    return buffer.getvalue()


def _csv_row(row: AuditLogRow) -> str:
    data = row.model_dump()
    return _csv_line("" if data[c] is None else data[c] for c in EXPORT_COLUMNS)


async def _csv_stream(first: Optional[AuditLogRow], rows: AsyncIterator[AuditLogRow]) -> AsyncIterator[str]:
    yield _csv_line(EXPORT_COLUMNS)
    if first is None:
        return
    yield _csv_row(first)
    async for row in rows:
        yield _csv_row(row)


@router.get("/org/{org_id}/logs/access/export")
async def export_access_logs(
    params: Annotated[_FilterParams, Depends()],
    org_id: Annotated[str, Depends(get_org_id)] = ...,
    settings: Annotated[AppSettings, Depends(get_app_settings)] = ...,
    export_service: Annotated[AuditExportService, Depends(get_export_service)] = ...,
):
    """
    Every matching row as CSV, streamed. No pagination.

    The first batch is pulled before the response starts, so a store failure or
    timeout at scan start maps to 503/504.
    """
    now = datetime.now(timezone.utc)
    audit_filter = params.audit_filter(org_id)
    time_range = params.time_range(now, settings.default_lookback_days)
    rows = export_service.export(audit_filter, time_range, params.sort)
    try:
        first: Optional[AuditLogRow] = await rows.__anext__()
    except StopAsyncIteration:
        first = None
    filename = export_filename(org_id, now)
    return StreamingResponse(
        _csv_stream(first, rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
