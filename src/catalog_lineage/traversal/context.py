"""
Lineage request normalization.

Validates a lineage request against the graph, performs the single
authorization check on the root and freezes everything the traversal needs
into a LineageContext.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from ..errors import EntityNotFound, IncompatibleRequest, NotAuthorized, UnsupportedEntityType
from ..graph.store import GraphStore, Vertex
from .filters import FilterCriteria, VertexPredicate, build_predicate
from .model import LineageDirection
from .taxonomy import TypeTaxonomy

logger = logging.getLogger(__name__)

ENTITY_READ = "entity-read"

# Depth used when the caller asks for depth 0. Decrementing never reaches 0.
UNBOUNDED = -1

DEFAULT_DEPTH = 3


def next_depth(depth: int) -> int:
    """Remaining budget one dataset-to-dataset hop further out"""
    return depth if depth == UNBOUNDED else depth - 1


@dataclass
class LineageRequest:
    """A lineage request as received from a caller"""
    guid: str
    depth: int = DEFAULT_DEPTH
    direction: Union[LineageDirection, str] = LineageDirection.BOTH
    hide_process: bool = False
    attributes: Iterable[str] = field(default_factory=set)
    traversal_filters: List[Union[FilterCriteria, Dict[str, Any]]] = field(default_factory=list)


@dataclass(frozen=True)
class LineageContext:
    """Immutable per-request traversal configuration"""
    guid: str
    root_vertex: Vertex
    direction: LineageDirection
    depth: int  # UNBOUNDED or a positive hop budget
    requested_depth: int
    hide_process: bool
    attributes: FrozenSet[str]
    is_dataset: bool
    is_process: bool
    projector: Any = field(compare=False, repr=False)
    traversal_filter: VertexPredicate = field(compare=False, repr=False, default=lambda vertex: True)

    def evaluate(self, vertex: Vertex) -> bool:
        """Visibility predicate: projector policy plus the request's traversal filters"""
        return self.projector.visible(vertex) and self.traversal_filter(vertex)

    def is_root(self, vertex: Vertex) -> bool:
        return vertex.id == self.root_vertex.id


class LineageRequestNormalizer:
    """Turns a LineageRequest into a LineageContext or fails."""

    def __init__(self, store: GraphStore, projector, authorizer, taxonomy: TypeTaxonomy):
        self.store = store
        self.projector = projector
        self.authorizer = authorizer
        self.taxonomy = taxonomy

    def normalize(self, request: LineageRequest) -> LineageContext:
        try:
            direction = LineageDirection.parse(request.direction)
        except ValueError as e:
            raise IncompatibleRequest(f"Invalid lineage direction: {request.direction!r}", request.guid) from e

        if not isinstance(request.depth, int) or request.depth < 0:
            raise IncompatibleRequest(f"Lineage depth must be a non-negative integer, got {request.depth!r}", request.guid)

        try:
            traversal_filter = build_predicate(request.traversal_filters)
        except IncompatibleRequest as e:
            raise IncompatibleRequest(str(e), request.guid) from e
        attributes = frozenset(request.attributes or ())

        root_vertex = self.store.find_vertex_by_id(request.guid)
        if root_vertex is None:
            raise EntityNotFound(f"No entity found for guid {request.guid}", request.guid)

        root_header = self.projector.project(root_vertex, attributes)
        if not self.authorizer.authorize(root_header, ENTITY_READ):
            raise NotAuthorized(f"Not authorized to read entity lineage: guid={request.guid}", request.guid)

        is_dataset = self.store.is_of_category(root_vertex.type_name, self.taxonomy.dataset_marker)
        is_process = False
        if not is_dataset:
            is_process = self.store.is_of_category(root_vertex.type_name, self.taxonomy.process_marker)
            if not is_process:
                raise UnsupportedEntityType(
                    f"Entity {request.guid} of type {root_vertex.type_name} is neither a dataset nor a process",
                    request.guid
                )
            if request.hide_process:
                raise IncompatibleRequest(
                    f"hideProcess is not supported for process entity {request.guid} of type {root_vertex.type_name}",
                    request.guid
                )

        depth = UNBOUNDED if request.depth == 0 else request.depth

        logger.debug("Lineage request guid=%s type=%s direction=%s depth=%s hide_process=%s",
                     request.guid, root_vertex.type_name, direction.value, depth, request.hide_process)

        return LineageContext(
            guid=request.guid,
            root_vertex=root_vertex,
            direction=direction,
            depth=depth,
            requested_depth=request.depth,
            hide_process=request.hide_process,
            attributes=attributes,
            is_dataset=is_dataset,
            is_process=is_process,
            projector=self.projector,
            traversal_filter=traversal_filter
        )
