"""Time range defaults, paging bounds, filter parsing."""

from datetime import date, datetime, timedelta, timezone

import pytest

from access_audit.domain.exceptions import (
    InvalidFilterError,
    InvalidPageError,
    InvalidTimeRangeError,
)
from access_audit.domain.models.query import AuthMethodType, PageRequest, SortField, TimeRange
from access_audit.domain.validators.audit_validator import build_audit_filter, parse_time_bound

NOW = datetime(2026, 3, 10, 14, 30, 15, tzinfo=timezone.utc)


def test_time_range_defaults_to_lookback_until_now():
    tr = TimeRange.from_params(None, None, now=NOW, lookback_days=7)
    assert tr.end == NOW
    assert tr.start == NOW - timedelta(days=7)


def test_time_range_bare_end_date_uses_current_time_of_day():
    tr = TimeRange.from_params(date(2026, 3, 1), date(2026, 3, 5), now=NOW)
    assert tr.start == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert tr.end == datetime(2026, 3, 5, 14, 30, 15, tzinfo=timezone.utc)


def test_time_range_naive_datetimes_are_utc():
    tr = TimeRange(start=datetime(2026, 1, 1), end=datetime(2026, 1, 2))
    assert tr.start.tzinfo == timezone.utc
    assert tr.start_epoch == 1767225600
    assert tr.contains(1767225600)
    assert tr.contains(tr.end_epoch)
    assert not tr.contains(tr.end_epoch + 1)


def test_time_range_start_after_end_rejected():
    with pytest.raises(InvalidTimeRangeError):
        TimeRange(start=datetime(2026, 1, 2), end=datetime(2026, 1, 1))


def test_parse_time_bound():
    assert parse_time_bound("timeStart", "2026-03-01") == date(2026, 3, 1)
    assert parse_time_bound("timeEnd", "2026-03-01T10:00:00.000Z") == datetime(
        2026, 3, 1, 10, tzinfo=timezone.utc
    )
    assert parse_time_bound("timeEnd", None) is None
    with pytest.raises(InvalidTimeRangeError):
        parse_time_bound("timeStart", "yesterday")


def test_page_request_from_index():
    page = PageRequest.from_index(3, 20)
    assert page.offset == 60
    assert page.limit == 20


def test_page_request_bounds():
    with pytest.raises(InvalidPageError):
        PageRequest(limit=0)
    with pytest.raises(InvalidPageError):
        PageRequest(limit=10, offset=-1)
    with pytest.raises(InvalidPageError):
        PageRequest.from_index(-1, 10)


def test_page_request_clamped():
    assert PageRequest.clamped(None, None, default=100, maximum=1000) == PageRequest(100, 0)
    assert PageRequest.clamped(5000, 20, default=100, maximum=1000) == PageRequest(1000, 20)


def test_build_audit_filter():
    f = build_audit_filter(org_id=" org-1 ", action=False, auth_type="pincode", location="", actor="alice")
    assert f.org_id == "org-1"
    assert f.action is False
    assert f.auth_type is AuthMethodType.PINCODE
    assert f.location is None
    assert f.actor == "alice"


def test_build_audit_filter_rejects_bad_values():
    with pytest.raises(InvalidFilterError):
        build_audit_filter(org_id="")
    with pytest.raises(InvalidFilterError):
        build_audit_filter(org_id="org-1", auth_type="sms")
    with pytest.raises(InvalidFilterError):
        build_audit_filter(org_id="org-1", resource_id=-4)


def test_sort_field_attribute():
    assert SortField.RESOURCE_ID.attribute == "resource_id"
    assert SortField.TIMESTAMP.attribute == "timestamp"


def test_build_audit_filter_keeps_whitespace_in_text_filters():
    f = build_audit_filter(org_id="org-1", location=" eu-west", actor=" alice")
    assert f.actor == " alice"
    assert f.location == " eu-west"


def test_time_range_fractional_start_rounds_up():
    tr = TimeRange(
        start=datetime(2026, 1, 1, 0, 0, 10, 500000, tzinfo=timezone.utc),
        end=datetime(2026, 1, 1, 0, 1, tzinfo=timezone.utc),
    )
    assert tr.start_epoch == 1767225611
    assert not tr.contains(1767225610)
    assert tr.contains(1767225611)
