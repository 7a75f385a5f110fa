"""
Cypher Traversal Adapter

Alternative to the native engine: the dataset <- process -> dataset pattern
is matched by Neo4j itself with a quantified path pattern (Neo4j 5.9+). The
returned relationships are then walked from the root with the native
engine, so both strategies produce the same lineage. Expanded mode only.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import IncompatibleRequest, TraversalBackendFailure
from ..graph.store import Edge, EdgeDirection, GraphStore, Vertex
from .aggregator import aggregate, sub_walk_directions
from .context import UNBOUNDED, LineageContext
from .engine import TraversalBudget, TraversalEngine
from .model import LineageDirection, LineageGraph
from .taxonomy import TypeTaxonomy

logger = logging.getLogger(__name__)

# Quantifier bounds cannot be query parameters, so they are formatted in
# from validated integers. Labels and the guid stay parameters.
DATASET_LINEAGE_QUERY = """
MATCH (root {{id: $guid}})
MATCH path = (root)((ds)<-[incoming]-(process)-[outgoing]->(next)
                    WHERE type(incoming) = $incomingEdgeLabel
                      AND type(outgoing) = $outgoingEdgeLabel){{1,{max_hops}}}(last)
UNWIND relationships(path) AS r
RETURN DISTINCT r, startNode(r) AS source, endNode(r) AS target
"""

PROCESS_LINEAGE_QUERY = """
MATCH (root {{id: $guid}})
MATCH path = (root)-[first]->(start)((ds)<-[incoming]-(process)-[outgoing]->(next)
                    WHERE type(incoming) = $incomingEdgeLabel
                      AND type(outgoing) = $outgoingEdgeLabel){{0,{max_hops}}}(last)
WHERE type(first) = $outgoingEdgeLabel
UNWIND relationships(path) AS r
RETURN DISTINCT r, startNode(r) AS source, endNode(r) AS target
"""


class QueryResultGraph:
    """
    Edges returned by a lineage query, indexed like a graph store.

    The native walk is replayed over this index so that visibility pruning,
    the visited set and the depth rule match the native engine exactly.
    """

    def __init__(self, edges: Iterable[Edge], taxonomy: TypeTaxonomy):
        self.taxonomy = taxonomy
        self.vertices: Dict[str, Vertex] = {}
        self._edges: Dict[Tuple[str, EdgeDirection, str], List[Edge]] = {}

        seen = set()
        for edge in edges:
            key = edge.relationship_id or (edge.label, edge.source.id, edge.target.id)
            if key in seen:
                continue
            seen.add(key)
            self.vertices.setdefault(edge.source.id, edge.source)
            self.vertices.setdefault(edge.target.id, edge.target)
            self._edges.setdefault((edge.source.id, EdgeDirection.OUT, edge.label), []).append(edge)
            self._edges.setdefault((edge.target.id, EdgeDirection.IN, edge.label), []).append(edge)

    def find_vertex_by_id(self, vertex_id: str) -> Optional[Vertex]:
        return self.vertices.get(vertex_id)

    def edges(self, vertex: Vertex, direction: EdgeDirection, label: str) -> List[Edge]:
        return list(self._edges.get((vertex.id, direction, label), ()))

    def is_of_category(self, type_name: str, category_marker: str) -> bool:
        return self.taxonomy.is_of_category(type_name, category_marker)

    def execute_script(self, script: str, bindings: Mapping[str, Any]) -> List[Edge]:
        raise TraversalBackendFailure("Lineage query results cannot run further queries")


class CypherTraversalAdapter:
    """Resolves lineage by delegating the pattern match to Cypher."""

    def __init__(self, store: GraphStore, taxonomy: TypeTaxonomy, require_both_visible: bool = False, max_vertices: int = 0):
        self.store = store
        self.taxonomy = taxonomy
        self.require_both_visible = require_both_visible
        self.max_vertices = max_vertices

    def traverse(self, context: LineageContext) -> LineageGraph:
        if context.hide_process:
            raise IncompatibleRequest("hideProcess is only supported by the native traversal engine", context.guid)

        budget = TraversalBudget(self.max_vertices)
        results = [
            self._get_lineage_info(context, direction, budget)
            for direction in sub_walk_directions(context.direction)
        ]
        return aggregate(context, results)

    def _get_lineage_info(self, context: LineageContext, direction: LineageDirection,
                          budget: TraversalBudget) -> LineageGraph:
        bindings: Dict[str, Any] = {}
        query = self.get_lineage_query(context.guid, direction, context.depth, context.is_dataset, bindings)

        logger.debug("Executing Cypher lineage query guid=%s direction=%s bindings=%s",
                     context.guid, direction.value, bindings)
        edges = self.store.execute_script(query, bindings)

        # Only edges the native walk reaches from the root are kept
        result_graph = QueryResultGraph(edges, self.taxonomy)
        engine = TraversalEngine(result_graph, self.taxonomy, self.require_both_visible, self.max_vertices)
        return engine.traverse_direction(context, direction, budget)

    def get_lineage_query(self, guid: str, direction: LineageDirection, depth: int, is_dataset: bool,
                          bindings: Dict[str, Any]) -> str:
        """
        Build the Cypher query for one direction and fill in its bindings.

        dataSetDepth counts dataset-to-dataset hops from a dataset root;
        processDepth is the same budget after the free hop out of a process.
        """
        if direction == LineageDirection.BOTH:
            raise ValueError("BOTH is resolved as two single-direction queries")

        incoming_label, outgoing_label = self.taxonomy.edge_labels.for_direction(direction == LineageDirection.INPUT)

        bindings["guid"] = guid
        bindings["incomingEdgeLabel"] = incoming_label
        bindings["outgoingEdgeLabel"] = outgoing_label
        bindings["dataSetDepth"] = depth
        bindings["processDepth"] = depth if depth == UNBOUNDED else depth - 1

        if is_dataset:
            max_hops = "" if depth == UNBOUNDED else int(bindings["dataSetDepth"])
            return DATASET_LINEAGE_QUERY.format(max_hops=max_hops)

        max_hops = "" if depth == UNBOUNDED else int(bindings["processDepth"])
        return PROCESS_LINEAGE_QUERY.format(max_hops=max_hops)
