"""Resource catalog protocol and a static in-memory implementation."""

from typing import Dict, Iterable, Mapping, Optional, Protocol

from access_audit.domain.models.query import ResourceRef


class ResourceCatalog(Protocol):
    """Resolves resource ids to display names and routable identifiers."""

    async def resolve(self, resource_ids: Iterable[int]) -> Dict[int, ResourceRef]:
        """Return refs for the ids that exist; unknown ids are omitted."""
        ...


class InMemoryResourceCatalog:
    """Fixed catalog; used when no external catalog is wired and in tests."""

    def __init__(self, resources: Optional[Mapping[int, ResourceRef]] = None) -> None:
        self._resources: Dict[int, ResourceRef] = dict(resources or {})

    def register(self, ref: ResourceRef) -> None:
        self._resources[ref.resource_id] = ref

    async def resolve(self, resource_ids: Iterable[int]) -> Dict[int, ResourceRef]:
        return {rid: self._resources[rid] for rid in set(resource_ids) if rid in self._resources}
