"""Domain model for access audit events. Pure business semantics; no ORM or infrastructure."""

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Union

ActorType = Literal["user", "apiKey"]


@dataclass(frozen=True)
class UserActor:
    """Authenticated user attributed to a decision."""

    username: str
    user_id: str

    @property
    def actor_type(self) -> ActorType:
        return "user"

    @property
    def display_name(self) -> str:
        return self.username

    @property
    def actor_id(self) -> str:
        return self.user_id


@dataclass(frozen=True)
class ApiKeyActor:
    """API key attributed to a decision. Display name falls back to the key id when unnamed."""

    api_key_id: str
    name: Optional[str] = None

    @property
    def actor_type(self) -> ActorType:
        return "apiKey"

    @property
    def display_name(self) -> str:
        return self.name or self.api_key_id

    @property
    def actor_id(self) -> str:
        return self.api_key_id


# At most one actor per event; None means anonymous or system decision.
ActorIdentity = Union[UserActor, ApiKeyActor]


@dataclass(frozen=True)
class Decision:
    """Allow/deny outcome as supplied by the authorization engine."""

    action: bool
    reason: int
    resource_id: Optional[int] = None
    org_id: Optional[str] = None
    location: Optional[str] = None
    user: Optional[UserActor] = None
    api_key: Optional[ApiKeyActor] = None
    metadata: Any = None


@dataclass(frozen=True)
class RequestContext:
    """Request attributes as supplied by the request-handling layer."""

    path: str
    original_request_url: str
    scheme: str
    host: str
    method: str
    tls: bool
    request_ip: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    query: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class AuditEvent:
    """
    Immutable, persisted audit record for one gateway decision.
    Created once by the recorder; id is the store-assigned insertion sequence.
    """

    timestamp: int
    action: bool
    reason: int
    original_request_url: str
    scheme: str
    host: str
    path: str
    method: str
    tls: bool
    org_id: Optional[str] = None
    resource_id: Optional[int] = None
    location: Optional[str] = None
    actor_type: Optional[ActorType] = None
    actor: Optional[str] = None
    actor_id: Optional[str] = None
    auth_type: Optional[str] = None
    metadata: Optional[str] = None
    ip: Optional[str] = None
    id: Optional[int] = field(default=None, compare=False)
