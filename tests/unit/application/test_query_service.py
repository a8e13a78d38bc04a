"""Query engine: filters, pagination law, ordering, facet independence, enrichment, timeouts."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from access_audit.application.exceptions import QueryTimeoutError, StorageError
from access_audit.application.query_service import METRIC_QUERY_LATENCY, AuditQueryService
from access_audit.domain.models.query import (
    AuditFilter,
    AuthMethodType,
    PageRequest,
    ResourceFacet,
    ResourceRef,
    SortField,
    SortSpec,
    StoreFacets,
)
from access_audit.domain.validators.audit_validator import build_audit_filter
from access_audit.observability.metrics import MetricsCollector


@pytest.fixture
async def seeded_store(memory_store, make_event, base_ts):
    events = [
        make_event(timestamp=base_ts + 30, action=True, reason=102, actor_type="user", actor="alice", actor_id="u1", location="eu-west", resource_id=5),
        make_event(timestamp=base_ts + 10, action=False, reason=201, resource_id=7, location="us-east"),
        make_event(timestamp=base_ts + 20, action=True, reason=106, actor_type="apiKey", actor="ci-key", actor_id="k1", auth_type="pincode"),
        make_event(timestamp=base_ts + 20, action=False, reason=203, actor_type="user", actor="bob", actor_id="u2", location="eu-west"),
        make_event(timestamp=base_ts + 40, action=True, reason=100, org_id="org-2", actor_type="user", actor="mallory", actor_id="u9", location="ap-south"),
        make_event(timestamp=base_ts + 86400 * 3, action=True, reason=100, location="later"),
    ]
    for event in events:
        await memory_store.append(event)
    return memory_store


@pytest.fixture
def service(seeded_store, catalog, logger):
    return AuditQueryService(store=seeded_store, catalog=catalog, logger=logger)


async def test_query_scopes_by_org_and_time(service, day_range):
    result = await service.query(AuditFilter(org_id="org-1"), day_range, PageRequest(limit=100))
    assert result.total_count == 4
    assert [r.timestamp - 1767225600 for r in result.rows] == [10, 20, 20, 30]


async def test_default_order_breaks_ties_by_insertion(service, day_range):
    result = await service.query(AuditFilter(org_id="org-1"), day_range, PageRequest(limit=100))
    tied = [r for r in result.rows if r.timestamp == 1767225620]
    assert [r.id for r in tied] == [3, 4]


async def test_filters_are_and_combined(service, day_range):
    result = await service.query(
        AuditFilter(org_id="org-1", action=False, location="eu-west"), day_range, PageRequest(limit=100)
    )
    assert [r.actor for r in result.rows] == ["bob"]
    assert result.total_count == 1


async def test_filter_by_actor_resource_and_type(service, day_range):
    by_actor = await service.query(AuditFilter(org_id="org-1", actor="ci-key"), day_range, PageRequest(limit=10))
    assert [r.reason for r in by_actor.rows] == [106]
    by_resource = await service.query(AuditFilter(org_id="org-1", resource_id=7), day_range, PageRequest(limit=10))
    assert [r.reason for r in by_resource.rows] == [201]
    by_type = await service.query(
        AuditFilter(org_id="org-1", auth_type=AuthMethodType.PINCODE), day_range, PageRequest(limit=10)
    )
    assert [r.type for r in by_type.rows] == ["pincode"]


async def test_pagination_law(service, day_range):
    f = AuditFilter(org_id="org-1")
    full = await service.query(f, day_range, PageRequest(limit=100))
    pages = []
    first = await service.query(f, day_range, PageRequest.from_index(0, 3))
    for index in range(2):
        page = await service.query(f, day_range, PageRequest.from_index(index, 3))
        assert page.total_count == first.total_count
        pages.append(page.rows)
    assert sum(len(p) for p in pages) == first.total_count
    assert [r.id for p in pages for r in p] == [r.id for r in full.rows]


async def test_offset_past_end_is_empty(service, day_range):
    result = await service.query(AuditFilter(org_id="org-1"), day_range, PageRequest(limit=10, offset=50))
    assert result.rows == ()
    assert result.total_count == 4


async def test_facets_ignore_non_time_filters(service, day_range):
    result = await service.query(
        AuditFilter(org_id="org-1", action=False, actor="nobody"), day_range, PageRequest(limit=10)
    )
    assert result.rows == ()
    assert result.total_count == 0
    assert result.facets.actors == ("alice", "bob", "ci-key")
    assert result.facets.locations == ("eu-west", "us-east")
    assert result.facets.resources == (
        ResourceFacet(resource_id=5, resource_name="Grafana"),
        ResourceFacet(resource_id=7, resource_name="Wiki"),
    )


async def test_facets_are_keyed_to_time_range(service, all_time):
    result = await service.query(AuditFilter(org_id="org-1"), all_time, PageRequest(limit=10))
    assert "later" in result.facets.locations
    assert "ap-south" not in result.facets.locations


async def test_rows_are_enriched_from_catalog(service, day_range):
    result = await service.query(AuditFilter(org_id="org-1", resource_id=5), day_range, PageRequest(limit=10))
    row = result.rows[0]
    assert row.resourceName == "Grafana"
    assert row.resourceNiceId == "grafana"
    assert row.reasonLabel == "Valid Access Token"


async def test_sort_descending_by_actor(service, day_range):
    result = await service.query(
        AuditFilter(org_id="org-1"),
        day_range,
        PageRequest(limit=10),
        SortSpec(field=SortField.ACTOR, descending=True),
    )
    # NULL actors first when descending
    assert [r.actor for r in result.rows] == [None, "ci-key", "bob", "alice"]


async def test_query_records_latency(seeded_store, catalog, logger, day_range):
    metrics = MetricsCollector()
    service = AuditQueryService(store=seeded_store, catalog=catalog, logger=logger, metrics=metrics)
    await service.query(AuditFilter(org_id="org-1"), day_range, PageRequest(limit=10))
    assert metrics.export_metrics()["histograms"][METRIC_QUERY_LATENCY]["count"] == 1
    assert logger.info.call_args[0][0] == "audit_query"


async def test_query_storage_error_propagates(catalog, logger, day_range):
    store = AsyncMock()
    store.filtered_scan = AsyncMock(side_effect=StorageError("connection refused"))
    service = AuditQueryService(store=store, catalog=catalog, logger=logger)
    with pytest.raises(StorageError):
        await service.query(AuditFilter(org_id="org-1"), day_range, PageRequest(limit=10))


async def test_query_timeout(catalog, logger, day_range):
    async def slow_scan(*args, **kwargs):
        await asyncio.sleep(5)
        return [], 0

    store = AsyncMock()
    store.filtered_scan = slow_scan
    store.facet_scan = AsyncMock(return_value=StoreFacets())
    service = AuditQueryService(store=store, catalog=catalog, logger=logger, timeout_seconds=0.01)
    with pytest.raises(QueryTimeoutError):
        await service.query(AuditFilter(org_id="org-1"), day_range, PageRequest(limit=10))
    assert logger.error.call_args[0][0] == "audit_query_timeout"


async def test_catalog_register_and_unknown_ids(catalog):
    catalog.register(ResourceRef(resource_id=9, name="Jenkins", nice_id="jenkins"))
    resolved = await catalog.resolve([9, 5, 404])
    assert set(resolved) == {5, 9}
    assert resolved[9].nice_id == "jenkins"


async def test_actor_filter_is_exact_including_whitespace(memory_store, make_event, catalog, logger, day_range, base_ts):
    await memory_store.append(make_event(timestamp=base_ts + 1, actor_type="user", actor="alice", actor_id="u1"))
    await memory_store.append(make_event(timestamp=base_ts + 2, actor_type="user", actor=" alice", actor_id="u2"))
    service = AuditQueryService(store=memory_store, catalog=catalog, logger=logger)

    result = await service.query(build_audit_filter(org_id="org-1", actor=" alice"), day_range, PageRequest(limit=10))
    assert [r.actorId for r in result.rows] == ["u2"]

    result = await service.query(build_audit_filter(org_id="org-1", actor="alice"), day_range, PageRequest(limit=10))
    assert [r.actorId for r in result.rows] == ["u1"]
