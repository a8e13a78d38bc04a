"""DB-backed audit store. Persists access decisions to the request_audit_log table (SQLAlchemy async)."""

from typing import AsyncGenerator, List, Optional, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access_audit.application.exceptions import StorageError
from access_audit.domain.models.audit_event import AuditEvent
from access_audit.domain.models.query import AuditFilter, SortSpec, StoreFacets, TimeRange
from access_audit.infrastructure.database.models import RequestAuditLog


def _to_orm(event: AuditEvent) -> RequestAuditLog:
    return RequestAuditLog(
        timestamp=event.timestamp,
        org_id=event.org_id,
        action=event.action,
        reason=event.reason,
        resource_id=event.resource_id,
        location=event.location,
        actor_type=event.actor_type,
        actor=event.actor,
        actor_id=event.actor_id,
        auth_type=event.auth_type,
        metadata_=event.metadata,
        original_request_url=event.original_request_url,
        scheme=event.scheme,
        host=event.host,
        path=event.path,
        method=event.method,
        tls=event.tls,
        ip=event.ip,
    )


def _to_domain(orm: RequestAuditLog) -> AuditEvent:
    return AuditEvent(
        id=orm.id,
        timestamp=orm.timestamp,
        org_id=orm.org_id,
        action=orm.action,
        reason=orm.reason,
        resource_id=orm.resource_id,
        location=orm.location,
        actor_type=orm.actor_type,
        actor=orm.actor,
        actor_id=orm.actor_id,
        auth_type=orm.auth_type,
        metadata=orm.metadata_,
        original_request_url=orm.original_request_url,
        scheme=orm.scheme,
        host=orm.host,
        path=orm.path,
        method=orm.method,
        tls=orm.tls,
        ip=orm.ip,
    )


def _scoped(stmt: Select, org_id: Optional[str], time_range: TimeRange) -> Select:
    stmt = stmt.where(
        RequestAuditLog.timestamp >= time_range.start_epoch,
        RequestAuditLog.timestamp <= time_range.end_epoch,
    )
    if org_id is not None:
        stmt = stmt.where(RequestAuditLog.org_id == org_id)
    return stmt


def _filtered(stmt: Select, audit_filter: AuditFilter, time_range: TimeRange) -> Select:
    stmt = _scoped(stmt, audit_filter.org_id, time_range)
    if audit_filter.action is not None:
        stmt = stmt.where(RequestAuditLog.action == audit_filter.action)
    if audit_filter.auth_type is not None:
        stmt = stmt.where(RequestAuditLog.auth_type == audit_filter.auth_type.value)
    if audit_filter.resource_id is not None:
        stmt = stmt.where(RequestAuditLog.resource_id == audit_filter.resource_id)
    if audit_filter.location is not None:
        stmt = stmt.where(RequestAuditLog.location == audit_filter.location)
    if audit_filter.actor is not None:
        stmt = stmt.where(RequestAuditLog.actor == audit_filter.actor)
    return stmt


def _ordered(stmt: Select, sort: SortSpec) -> Select:
    column = getattr(RequestAuditLog, sort.field.attribute)
    primary = column.desc().nulls_first() if sort.descending else column.asc().nulls_last()
    return stmt.order_by(primary, RequestAuditLog.id.asc())


class DbAuditStore:
    """Implements AuditStore. One session per call, so concurrent appends are safe."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, event: AuditEvent) -> AuditEvent:
        orm = _to_orm(event)
        try:
            async with self._session_factory() as session:
                session.add(orm)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Audit append failed: {e}") from e
        return _to_domain(orm)

    async def filtered_scan(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        sort: SortSpec,
        limit: Optional[int],
        offset: int = 0,
    ) -> Tuple[List[AuditEvent], int]:
        count_stmt = _filtered(select(func.count()).select_from(RequestAuditLog), audit_filter, time_range)
        rows_stmt = _ordered(_filtered(select(RequestAuditLog), audit_filter, time_range), sort).offset(offset)
        if limit is not None:
            rows_stmt = rows_stmt.limit(limit)
        try:
            async with self._session_factory() as session:
                total = (await session.execute(count_stmt)).scalar_one()
                result = await session.execute(rows_stmt)
                rows = [_to_domain(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Audit scan failed: {e}") from e
        return rows, total

    async def stream_scan(
        self,
        audit_filter: AuditFilter,
        time_range: TimeRange,
        sort: SortSpec,
        batch_size: int,
    ) -> AsyncGenerator[AuditEvent, None]:
        stmt = _ordered(_filtered(select(RequestAuditLog), audit_filter, time_range), sort)
        stmt = stmt.execution_options(yield_per=batch_size)
        try:
            async with self._session_factory() as session:
                result = await session.stream_scalars(stmt)
                async for orm in result:
                    yield _to_domain(orm)
        except SQLAlchemyError as e:
            raise StorageError(f"Audit export scan failed: {e}") from e

    async def facet_scan(self, org_id: Optional[str], time_range: TimeRange) -> StoreFacets:
        def distinct(column) -> Select:
            stmt = select(column).distinct().where(column.is_not(None))
            return _scoped(stmt, org_id, time_range).order_by(column)

        try:
            async with self._session_factory() as session:
                actors = (await session.execute(distinct(RequestAuditLog.actor))).scalars().all()
                resource_ids = (await session.execute(distinct(RequestAuditLog.resource_id))).scalars().all()
                locations = (await session.execute(distinct(RequestAuditLog.location))).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Audit facet scan failed: {e}") from e
        return StoreFacets(
            actors=tuple(actors),
            resource_ids=tuple(resource_ids),
            locations=tuple(locations),
        )
