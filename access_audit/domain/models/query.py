"""Query model: filter, time range, paging, sorting, facets. Pure values, validated on construction."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple, Union

from access_audit.domain.exceptions import (
    InvalidFilterError,
    InvalidPageError,
    InvalidTimeRangeError,
)


class AuthMethodType(str, Enum):
    """Auth-method subtype used by the `type` filter."""

    PASSWORD = "password"
    PINCODE = "pincode"
    LOGIN = "login"
    WHITELISTED_EMAIL = "whitelistedEmail"


class SortField(str, Enum):
    TIMESTAMP = "timestamp"
    ACTION = "action"
    REASON = "reason"
    ACTOR = "actor"
    LOCATION = "location"
    RESOURCE_ID = "resourceId"
    METHOD = "method"
    HOST = "host"

    @property
    def attribute(self) -> str:
        """AuditEvent attribute backing this sort key."""
        return "resource_id" if self is SortField.RESOURCE_ID else self.value


@dataclass(frozen=True)
class SortSpec:
    field: SortField = SortField.TIMESTAMP
    descending: bool = False


DEFAULT_SORT = SortSpec()


@dataclass(frozen=True)
class AuditFilter:
    """AND-combined filter. org_id scopes; the remaining fields narrow rows but never facets."""

    org_id: Optional[str] = None
    action: Optional[bool] = None
    auth_type: Optional[AuthMethodType] = None
    resource_id: Optional[int] = None
    location: Optional[str] = None
    actor: Optional[str] = None

    @staticmethod
    def parse_auth_type(value: Optional[str]) -> Optional[AuthMethodType]:
        if value is None or value == "":
            return None
        try:
            return AuthMethodType(value)
        except ValueError as e:
            allowed = ", ".join(t.value for t in AuthMethodType)
            raise InvalidFilterError(f"type must be one of: {allowed}; got {value!r}") from e


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeRange:
    """Inclusive [start, end] range of instants, UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _to_utc(self.start))
        object.__setattr__(self, "end", _to_utc(self.end))
        if self.start > self.end:
            raise InvalidTimeRangeError(
                f"timeStart ({self.start.isoformat()}) must not be after timeEnd ({self.end.isoformat()})"
            )

    @property
    def start_epoch(self) -> int:
        # first whole second not before start
        return math.ceil(self.start.timestamp())

    @property
    def end_epoch(self) -> int:
        return int(self.end.timestamp())

    def contains(self, epoch_seconds: int) -> bool:
        return self.start_epoch <= epoch_seconds <= self.end_epoch

    @classmethod
    def from_params(
        cls,
        start: Union[datetime, date, None],
        end: Union[datetime, date, None],
        *,
        now: datetime,
        lookback_days: int = 7,
    ) -> "TimeRange":
        """
        Build a range from caller bounds.
        Missing start: now - lookback_days. Bare-date start: midnight UTC.
        Missing end: now. Bare-date end: that date at the current time of day, not midnight.
        """
        now = _to_utc(now)
        if start is None:
            start_dt = now - timedelta(days=lookback_days)
        elif isinstance(start, datetime):
            start_dt = start
        else:
            start_dt = datetime.combine(start, time.min, tzinfo=timezone.utc)

        if end is None:
            end_dt = now
        elif isinstance(end, datetime):
            end_dt = end
        else:
            end_dt = datetime.combine(end, now.timetz())
        return cls(start=start_dt, end=end_dt)


@dataclass(frozen=True)
class PageRequest:
    """Page window. offset = page index * size when built from an index."""

    limit: int
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise InvalidPageError(f"limit must be positive, got {self.limit}")
        if self.offset < 0:
            raise InvalidPageError(f"offset must not be negative, got {self.offset}")

    @classmethod
    def from_index(cls, page: int, size: int) -> "PageRequest":
        if page < 0:
            raise InvalidPageError(f"page must not be negative, got {page}")
        return cls(limit=size, offset=page * size)

    @classmethod
    def clamped(cls, limit: Optional[int], offset: Optional[int], *, default: int, maximum: int) -> "PageRequest":
        """Serving-layer constructor: missing limit uses default, oversized limit is capped."""
        size = default if limit is None else limit
        return cls(limit=min(size, maximum), offset=offset or 0)


@dataclass(frozen=True)
class ResourceFacet:
    resource_id: int
    resource_name: Optional[str] = None


@dataclass(frozen=True)
class FacetSet:
    """Distinct values over the time range (and org), used to populate filter selectors."""

    actors: Tuple[str, ...] = ()
    resources: Tuple[ResourceFacet, ...] = ()
    locations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResourceRef:
    """Resource catalog entry: display name and routable identifier."""

    resource_id: int
    name: str
    nice_id: Optional[str] = None


@dataclass(frozen=True)
class StoreFacets:
    """Raw facet scan output; resource names are resolved later against the catalog."""

    actors: Tuple[str, ...] = ()
    resource_ids: Tuple[int, ...] = ()
    locations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class QueryResult:
    rows: tuple
    total_count: int
    facets: FacetSet = field(default_factory=FacetSet)
