"""
Neo4j Graph Store

Implements the graph access port on top of the Neo4j Python driver.
Node conventions: the `id` property is the entity guid and the node label is
the entity type name. Relationship conventions: the relationship type is the
edge label and the `relationship_id` property identifies the relationship.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError
from neo4j.graph import Node, Relationship

from ..errors import TraversalBackendFailure
from ..traversal.taxonomy import TypeTaxonomy
from .store import Edge, EdgeDirection, Vertex

logger = logging.getLogger(__name__)

FIND_VERTEX_QUERY = """
MATCH (n {id: $vertex_id})
RETURN n
LIMIT 1
"""

OUT_EDGES_QUERY = """
MATCH (n {id: $vertex_id})-[r]->(m)
WHERE type(r) = $label
RETURN r, n AS source, m AS target
"""

IN_EDGES_QUERY = """
MATCH (n {id: $vertex_id})<-[r]-(m)
WHERE type(r) = $label
RETURN r, m AS source, n AS target
"""


class Neo4jGraphStore:
    """Graph store backed by a Neo4j database."""

    def __init__(self, neo4j_uri: str, neo4j_user: str, neo4j_password: str, taxonomy: TypeTaxonomy, database: Optional[str] = None, driver=None):
        """
        Initialize the store.

        Args:
            neo4j_uri: Neo4j connection URI
            neo4j_user: Neo4j username
            neo4j_password: Neo4j password
            taxonomy: Loaded type taxonomy
            database: Database name (server default when None)
            driver: Pre-built driver to use instead of connecting
        """
        self.driver = driver if driver is not None else GraphDatabase.driver(neo4j_uri, auth=(neo4j_user, neo4j_password))
        self.taxonomy = taxonomy
        self.database = database

    def close(self):
        """Close Neo4j driver"""
        self.driver.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _run(self, query: str, parameters: Mapping[str, Any]) -> List:
        try:
            with self.driver.session(database=self.database) as session:
                return list(session.run(query, dict(parameters)))
        except (Neo4jError, DriverError) as e:
            raise TraversalBackendFailure(f"Neo4j query failed: {e}") from e

    def find_vertex_by_id(self, vertex_id: str) -> Optional[Vertex]:
        records = self._run(FIND_VERTEX_QUERY, {"vertex_id": vertex_id})
        if not records:
            return None
        return self._to_vertex(records[0]["n"])

    def edges(self, vertex: Vertex, direction: EdgeDirection, label: str) -> List[Edge]:
        query = OUT_EDGES_QUERY if direction == EdgeDirection.OUT else IN_EDGES_QUERY
        records = self._run(query, {"vertex_id": vertex.id, "label": label})
        return [
            self._to_edge(record["r"], self._to_vertex(record["source"]), self._to_vertex(record["target"]))
            for record in records
        ]

    def is_of_category(self, type_name: str, category_marker: str) -> bool:
        return self.taxonomy.is_of_category(type_name, category_marker)

    def execute_script(self, script: str, bindings: Mapping[str, Any]) -> List[Edge]:
        """
        Run a Cypher lineage query and collect every relationship it returns.

        Relationships may come back bare or inside lists; node values are
        accepted silently, anything else is logged and ignored.
        """
        edges: List[Edge] = []
        for record in self._run(script, bindings):
            for value in record.values():
                items = value if isinstance(value, list) else [value]
                for item in items:
                    if isinstance(item, Relationship):
                        edges.append(self._to_edge(item))
                    elif not isinstance(item, Node):
                        logger.warning("Invalid value of type %s found in lineage query result, ignoring",
                                       type(item).__name__)
        return edges

    def _to_vertex(self, node: Node) -> Vertex:
        properties: Dict[str, Any] = dict(node)
        vertex_id = properties.get("id")
        if vertex_id is None:
            raise TraversalBackendFailure(f"Node {node.element_id} has no id property")
        return Vertex(id=vertex_id, type_name=self._type_name(node.labels), properties=properties)

    def _type_name(self, labels) -> str:
        """Pick the label the taxonomy knows; fall back to the first label"""
        ordered = sorted(labels)
        for label in ordered:
            if self.taxonomy.is_known_type(label):
                return label
        return ordered[0] if ordered else ""

    def _to_edge(self, rel: Relationship, source: Optional[Vertex] = None, target: Optional[Vertex] = None) -> Edge:
        properties = dict(rel)
        return Edge(
            label=rel.type,
            source=source if source is not None else self._to_vertex(rel.start_node),
            target=target if target is not None else self._to_vertex(rel.end_node),
            relationship_id=properties.get("relationship_id"),
            properties=properties
        )
