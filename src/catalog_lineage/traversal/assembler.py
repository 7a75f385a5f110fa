"""
Relation Assembler

Turns traversed process edges into lineage relations. In expanded mode both
edges of a dataset -> process -> dataset pair become relations; with
hide-process the pair collapses into one dataset -> dataset relation that
carries the process id.
"""

from ..graph.store import Edge, Vertex
from .context import LineageContext
from .model import LineageGraph, LineageRelation
from .taxonomy import TypeTaxonomy


class RelationAssembler:
    """
    Records relations and their endpoint entities into one LineageGraph.

    Each add_* method returns True when the pair was skipped because of the
    visibility predicate; the engine does not traverse past skipped pairs.
    """

    def __init__(self, context: LineageContext, lineage: LineageGraph, taxonomy: TypeTaxonomy, require_both_visible: bool = False):
        """
        Args:
            context: Request context (root, attributes, visibility)
            lineage: Result being accumulated
            taxonomy: Type taxonomy, for edge labels and process classification
            require_both_visible: Expanded mode records a pair only if both datasets are visible
        """
        self.context = context
        self.lineage = lineage
        self.taxonomy = taxonomy
        self.require_both_visible = require_both_visible
        self.process_inputs_edge = taxonomy.edge_labels.process_inputs

    def add_edge_pair(self, incoming_edge: Edge, outgoing_edge: Edge) -> bool:
        """Record a (dataset <- process -> dataset) pair in the mode the request asked for"""
        if self.context.hide_process:
            return self.add_virtual_edge(incoming_edge, outgoing_edge)
        return self.add_edges(incoming_edge, outgoing_edge)

    def add_edges(self, incoming_edge: Edge, outgoing_edge: Edge) -> bool:
        """Expanded mode: both process edges become relations"""
        left_vertex = incoming_edge.target
        process_vertex = incoming_edge.source
        right_vertex = outgoing_edge.target

        left_visible = self._visible(left_vertex)
        right_visible = self._visible(right_vertex)
        if self.require_both_visible:
            record = left_visible and right_visible
        else:
            record = left_visible or right_visible

        if not record:
            return True

        self._materialize(left_vertex)
        self._materialize(process_vertex)
        self._materialize(right_vertex)

        self._record_edge(incoming_edge)
        self._record_edge(outgoing_edge)
        return False

    def add_virtual_edge(self, incoming_edge: Edge, outgoing_edge: Edge) -> bool:
        """Compressed mode: one dataset -> dataset relation through a hidden process"""
        left_vertex = incoming_edge.target
        right_vertex = outgoing_edge.target
        process_vertex = outgoing_edge.source

        right_visible = self.context.evaluate(right_vertex)
        if not right_visible:
            return True
        if not (self.context.is_root(left_vertex) or self.context.evaluate(left_vertex)):
            return True

        self._materialize(left_vertex)
        self._materialize(right_vertex)

        # Expanding downstream: left was consumed, right was produced
        if incoming_edge.label == self.process_inputs_edge:
            relation = LineageRelation(left_vertex.id, right_vertex.id, None, process_vertex.id)
        else:
            relation = LineageRelation(right_vertex.id, left_vertex.id, None, process_vertex.id)

        self.lineage.add_relation(relation)
        return False

    def add_edge(self, edge: Edge) -> bool:
        """
        Record a single process edge.

        Used for the free first hop out of a process root and for edges
        returned by the Cypher adapter. Recorded when a non-process endpoint
        is visible or either endpoint is the root.
        """
        if self.lineage.contains_relationship(edge.relationship_id):
            return False

        if not any(self._counts_as_visible_endpoint(v) for v in (edge.source, edge.target)):
            return True

        self._materialize(edge.source)
        self._materialize(edge.target)
        self._record_edge(edge)
        return False

    def _counts_as_visible_endpoint(self, vertex: Vertex) -> bool:
        if self.context.is_root(vertex):
            return True
        return not self.taxonomy.is_process(vertex.type_name) and self.context.evaluate(vertex)

    def _visible(self, vertex: Vertex) -> bool:
        return self.context.is_root(vertex) or self.context.evaluate(vertex)

    def _record_edge(self, edge: Edge) -> None:
        """Add one process edge as a relation oriented along the data flow"""
        if self.lineage.contains_relationship(edge.relationship_id):
            return

        process_id = edge.source.id
        dataset_id = edge.target.id
        if edge.label == self.process_inputs_edge:
            relation = LineageRelation(dataset_id, process_id, edge.relationship_id)
        else:
            relation = LineageRelation(process_id, dataset_id, edge.relationship_id)

        self.lineage.add_relation(relation)

    def _materialize(self, vertex: Vertex) -> None:
        if vertex.id not in self.lineage.guid_entity_map:
            self.lineage.guid_entity_map[vertex.id] = self.context.projector.project(vertex, self.context.attributes)
