"""
Entity projection and authorization.

The projector turns a vertex into the EntityHeader returned to callers and
decides which vertices are visible during traversal. The authorizer is
consulted once per request, against the root entity only.
"""

from typing import Callable, Iterable, Optional, Protocol, Set

from .graph.store import Vertex
from .traversal.model import EntityHeader

DELETED_STATUS = "DELETED"
DISPLAY_ATTRIBUTES = ("name", "displayName", "qualifiedName")


class EntityProjector(Protocol):
    def project(self, vertex: Vertex, attributes: Iterable[str]) -> EntityHeader:
        ...

    def visible(self, vertex: Vertex) -> bool:
        ...


class Authorizer(Protocol):
    def authorize(self, entity: EntityHeader, action: str) -> bool:
        ...


class GraphEntityProjector:
    """Projects vertex properties; hides soft-deleted entities unless asked not to."""

    def __init__(self, include_deleted: bool = False, predicate: Optional[Callable[[Vertex], bool]] = None):
        self.include_deleted = include_deleted
        self.predicate = predicate

    def project(self, vertex: Vertex, attributes: Iterable[str]) -> EntityHeader:
        display_text = next(
            (vertex.get(name) for name in DISPLAY_ATTRIBUTES if vertex.get(name)),
            vertex.id
        )
        return EntityHeader(
            guid=vertex.id,
            type_name=vertex.type_name,
            status=vertex.get("status", "ACTIVE"),
            display_text=display_text,
            attributes={name: vertex.get(name) for name in attributes if name in vertex.properties},
            classification_names=list(vertex.get("classifications") or [])
        )

    def visible(self, vertex: Vertex) -> bool:
        if not self.include_deleted and vertex.get("status") == DELETED_STATUS:
            return False
        if self.predicate is not None:
            return self.predicate(vertex)
        return True


class AllowAllAuthorizer:
    def authorize(self, entity: EntityHeader, action: str) -> bool:
        return True


class TypeDenyListAuthorizer:
    """Denies every action on entities whose type is in the deny list"""

    def __init__(self, denied_types: Iterable[str]):
        self.denied_types: Set[str] = set(denied_types)

    def authorize(self, entity: EntityHeader, action: str) -> bool:
        return entity.type_name not in self.denied_types
