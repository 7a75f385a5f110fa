"""Dictionary-backed lineage graph store."""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import DataValidationError, TraversalBackendFailure
from ..traversal.taxonomy import TypeTaxonomy
from .loader import validate_seed
from .store import Edge, EdgeDirection, Vertex


class InMemoryGraphStore:
    """
    Holds vertices and process -> dataset edges in memory.

    Edges are indexed by (vertex id, direction, label) so that expanding a
    vertex costs one dictionary lookup per label. There is no query language,
    so execute_script always fails.
    """

    def __init__(self, taxonomy: TypeTaxonomy):
        self.taxonomy = taxonomy
        self.vertices: Dict[str, Vertex] = {}
        self._edges: Dict[Tuple[str, EdgeDirection, str], List[Edge]] = {}

    @classmethod
    def from_seed(cls, taxonomy: TypeTaxonomy, data: Dict[str, Any]) -> "InMemoryGraphStore":
        """Build a store from seed data in the loader's YAML format."""
        assets, rels = validate_seed(taxonomy, data)
        store = cls(taxonomy)
        for type_name, rows in assets.items():
            for row in rows:
                store.add_vertex(row["id"], type_name, **{k: v for k, v in row.items() if k != "id"})
        for r in rels:
            store.add_edge(r.type, r.from_id, r.to_id, relationship_id=r.relationship_id)
        return store

    def add_vertex(self, vertex_id: str, type_name: str, **properties) -> Vertex:
        vertex = Vertex(id=vertex_id, type_name=type_name, properties=dict(properties))
        self.vertices[vertex_id] = vertex
        return vertex

    def add_edge(self, label: str, source_id: str, target_id: str, relationship_id: Optional[str] = None, **properties) -> Edge:
        try:
            source = self.vertices[source_id]
            target = self.vertices[target_id]
        except KeyError as e:
            raise DataValidationError(f"Edge endpoint {e.args[0]!r} is not a known vertex") from e

        edge = Edge(label=label, source=source, target=target, relationship_id=relationship_id, properties=dict(properties))
        self._edges.setdefault((source_id, EdgeDirection.OUT, label), []).append(edge)
        self._edges.setdefault((target_id, EdgeDirection.IN, label), []).append(edge)
        return edge

    def find_vertex_by_id(self, vertex_id: str) -> Optional[Vertex]:
        return self.vertices.get(vertex_id)

    def edges(self, vertex: Vertex, direction: EdgeDirection, label: str) -> List[Edge]:
        return list(self._edges.get((vertex.id, direction, label), ()))

    def is_of_category(self, type_name: str, category_marker: str) -> bool:
        return self.taxonomy.is_of_category(type_name, category_marker)

    def execute_script(self, script: str, bindings: Mapping[str, Any]) -> List[Edge]:
        raise TraversalBackendFailure("In-memory graph store has no query language; use the native traversal engine")
