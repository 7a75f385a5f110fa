"""Graph access port.

Uses typing.Protocol for structural subtyping. The in-memory and Neo4j
stores implement it; the traversal code only ever sees this contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol


class EdgeDirection(str, Enum):
    """Edge direction relative to the vertex being queried"""
    IN = "in"    # the vertex is the edge target
    OUT = "out"  # the vertex is the edge source


@dataclass(frozen=True)
class Vertex:
    id: str
    type_name: str
    properties: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass(frozen=True)
class Edge:
    """A directed process -> dataset edge as stored in the graph"""
    label: str
    source: Vertex
    target: Vertex
    relationship_id: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


class GraphStore(Protocol):
    """Protocol for the lineage graph store."""

    def find_vertex_by_id(self, vertex_id: str) -> Optional[Vertex]:
        """Return the vertex with this id, or None."""
        ...

    def edges(self, vertex: Vertex, direction: EdgeDirection, label: str) -> Iterable[Edge]:
        """Edges with the given label touching the vertex on the given side."""
        ...

    def is_of_category(self, type_name: str, category_marker: str) -> bool:
        """Supertype-hierarchy membership test."""
        ...

    def execute_script(self, script: str, bindings: Mapping[str, Any]) -> List[Edge]:
        """Run a traversal query in the store's own query language."""
        ...
