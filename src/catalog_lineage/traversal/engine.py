"""
Native Traversal Engine

Walks the bipartite dataset <-> process graph from the request root.
Each unit of depth is one dataset-to-dataset hop through a process; a
process root gets its first hop to the adjacent datasets for free.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional, Set

from ..errors import TraversalLimitExceeded
from ..graph.store import EdgeDirection, GraphStore, Vertex
from .aggregator import aggregate, sub_walk_directions
from .assembler import RelationAssembler
from .context import LineageContext, next_depth
from .model import LineageDirection, LineageGraph
from .taxonomy import TypeTaxonomy

logger = logging.getLogger(__name__)


@dataclass
class TraversalState:
    """A dataset vertex waiting to be expanded"""
    vertex: Vertex
    depth: int  # remaining hop budget, UNBOUNDED never runs out


class TraversalBudget:
    """Counts expanded vertices across all sub-walks of one request"""

    def __init__(self, max_vertices: int):
        self.max_vertices = max_vertices
        self.expanded = 0

    def charge(self, guid: str) -> None:
        self.expanded += 1
        if self.max_vertices and self.expanded > self.max_vertices:
            raise TraversalLimitExceeded(
                f"Lineage traversal expanded more than {self.max_vertices} vertices", guid
            )


class TraversalEngine:
    """
    Core lineage traversal engine.

    The walk is a FIFO worklist with a visited set, so every dataset vertex
    is expanded at most once per top-level walk and is first reached along a
    shortest path, which keeps its remaining depth budget maximal.
    """

    def __init__(self, store: GraphStore, taxonomy: TypeTaxonomy, require_both_visible: bool = False, max_vertices: int = 0):
        """
        Initialize traversal engine.

        Args:
            store: Graph access port
            taxonomy: Loaded type taxonomy
            require_both_visible: Expanded mode records a pair only if both datasets are visible
            max_vertices: Abort after expanding this many vertices (0 = no limit)
        """
        self.store = store
        self.taxonomy = taxonomy
        self.require_both_visible = require_both_visible
        self.max_vertices = max_vertices

    def traverse(self, context: LineageContext) -> LineageGraph:
        """
        Resolve lineage for a normalized request.

        BOTH runs an upstream and a downstream walk independently and
        merges them.
        """
        budget = TraversalBudget(self.max_vertices)
        results = [
            self.traverse_direction(context, direction, budget)
            for direction in sub_walk_directions(context.direction)
        ]
        return aggregate(context, results)

    def traverse_direction(self, context: LineageContext, direction: LineageDirection,
                           budget: Optional[TraversalBudget] = None) -> LineageGraph:
        """Resolve one single-direction sub-walk"""
        if budget is None:
            budget = TraversalBudget(self.max_vertices)
        is_upstream = direction == LineageDirection.INPUT
        lineage = LineageGraph(context.guid, direction, context.requested_depth)
        assembler = RelationAssembler(context, lineage, self.taxonomy, self.require_both_visible)

        if context.is_dataset:
            self._traverse_edges(context.root_vertex, is_upstream, context.depth, assembler, budget)
        else:
            # one free hop from the process to its adjacent datasets
            labels = self.taxonomy.edge_labels
            hop_label = labels.process_inputs if is_upstream else labels.process_outputs
            for process_edge in self.store.edges(context.root_vertex, EdgeDirection.OUT, hop_label):
                assembler.add_edge(process_edge)
                self._traverse_edges(process_edge.target, is_upstream, next_depth(context.depth), assembler, budget)

        logger.debug("Lineage walk guid=%s direction=%s: %d entities, %d relations",
                     context.guid, direction.value, len(lineage.guid_entity_map), len(lineage.relations))
        return lineage

    def _traverse_edges(self, dataset_vertex: Vertex, is_upstream: bool, depth: int,
                        assembler: RelationAssembler, budget: TraversalBudget) -> None:
        """Expand dataset vertices breadth-first from one start vertex with a fresh visited set"""
        incoming_label, outgoing_label = self.taxonomy.edge_labels.for_direction(is_upstream)
        visited: Set[str] = set()
        queue = deque([TraversalState(vertex=dataset_vertex, depth=depth)])

        while queue:
            state = queue.popleft()

            if state.depth == 0 or state.vertex.id in visited:
                continue

            visited.add(state.vertex.id)
            budget.charge(assembler.context.guid)

            for incoming_edge in self.store.edges(state.vertex, EdgeDirection.IN, incoming_label):
                process_vertex = incoming_edge.source

                for outgoing_edge in self.store.edges(process_vertex, EdgeDirection.OUT, outgoing_label):
                    entity_vertex = outgoing_edge.target
                    skipped = assembler.add_edge_pair(incoming_edge, outgoing_edge)

                    if not skipped and entity_vertex.id not in visited:
                        queue.append(TraversalState(vertex=entity_vertex, depth=next_depth(state.depth)))
