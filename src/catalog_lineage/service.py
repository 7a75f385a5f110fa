"""
Lineage Service

Entry point for lineage resolution: normalizes the request, picks the
traversal strategy and returns the assembled lineage graph.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from .graph.store import GraphStore
from .projection import AllowAllAuthorizer, GraphEntityProjector
from .traversal.context import LineageRequest, LineageRequestNormalizer
from .traversal.cypher import CypherTraversalAdapter
from .traversal.engine import TraversalEngine
from .traversal.filters import FilterCriteria
from .traversal.model import LineageDirection, LineageGraph
from .traversal.taxonomy import TypeTaxonomy
from .utils import Config, get_type_model_path

logger = logging.getLogger(__name__)


class LineageService:
    """Resolves the provenance graph around a dataset or process entity."""

    def __init__(
        self,
        store: GraphStore,
        taxonomy: TypeTaxonomy,
        projector=None,
        authorizer=None,
        use_cypher: bool = False,
        require_both_visible: bool = False,
        max_vertices: int = 0
    ):
        """
        Initialize the lineage service.

        Args:
            store: Graph access port
            taxonomy: Loaded type taxonomy
            projector: Entity projector (defaults to GraphEntityProjector)
            authorizer: Authorization check (defaults to allowing everything)
            use_cypher: Resolve with the Cypher adapter instead of the native engine
            require_both_visible: Expanded mode records a pair only if both datasets are visible
            max_vertices: Vertex budget per request (0 = no limit)
        """
        self.store = store
        self.taxonomy = taxonomy
        self.projector = projector if projector is not None else GraphEntityProjector()
        self.authorizer = authorizer if authorizer is not None else AllowAllAuthorizer()
        self.use_cypher = use_cypher

        self.normalizer = LineageRequestNormalizer(store, self.projector, self.authorizer, taxonomy)
        self.engine = TraversalEngine(store, taxonomy, require_both_visible=require_both_visible, max_vertices=max_vertices)
        self.cypher_adapter = CypherTraversalAdapter(store, taxonomy, require_both_visible=require_both_visible, max_vertices=max_vertices)

    @classmethod
    def from_config(cls, projector=None, authorizer=None) -> "LineageService":
        """Build a Neo4j-backed service from environment configuration"""
        from .graph.neo4j_store import Neo4jGraphStore

        taxonomy = TypeTaxonomy(config_path=get_type_model_path())
        store = Neo4jGraphStore(
            Config.NEO4J_URI,
            Config.NEO4J_USER,
            Config.NEO4J_PASSWORD,
            taxonomy,
            database=Config.NEO4J_DATABASE
        )
        return cls(
            store,
            taxonomy,
            projector=projector,
            authorizer=authorizer,
            use_cypher=Config.LINEAGE_USING_CYPHER,
            require_both_visible=Config.LINEAGE_EXPANDED_REQUIRE_BOTH_VISIBLE,
            max_vertices=Config.LINEAGE_MAX_VERTICES
        )

    def resolve_lineage(
        self,
        root_id: str,
        direction: Union[LineageDirection, str] = LineageDirection.BOTH,
        depth: int = Config.LINEAGE_DEFAULT_DEPTH,
        hide_process: bool = False,
        attributes: Optional[Iterable[str]] = None,
        traversal_filters: Optional[List[Union[FilterCriteria, Dict[str, Any]]]] = None
    ) -> LineageGraph:
        """
        Resolve lineage around an entity.

        Args:
            root_id: Guid of a dataset-like or process-like entity
            direction: INPUT (upstream), OUTPUT (downstream) or BOTH
            depth: Dataset-to-dataset hops to explore; 0 means unbounded
            hide_process: Collapse process vertices into dataset-to-dataset relations
            attributes: Entity attributes to include in each entity header
            traversal_filters: Attribute conditions restricting visible entities

        Returns:
            LineageGraph with the entity map and relations

        Raises:
            EntityNotFound, UnsupportedEntityType, IncompatibleRequest,
            NotAuthorized, TraversalBackendFailure
        """
        return self.get_lineage_info(LineageRequest(
            guid=root_id,
            depth=depth,
            direction=direction,
            hide_process=hide_process,
            attributes=set(attributes or ()),
            traversal_filters=list(traversal_filters or [])
        ))

    def get_lineage_info(self, request: LineageRequest) -> LineageGraph:
        context = self.normalizer.normalize(request)

        if self.use_cypher and not context.hide_process:
            strategy = self.cypher_adapter
        else:
            if self.use_cypher:
                logger.debug("hideProcess requested for %s, using the native engine", context.guid)
            strategy = self.engine

        ret = strategy.traverse(context)

        logger.info("Resolved %s lineage for %s (depth=%s, hide_process=%s): %d entities, %d relations",
                    ret.lineage_direction.value, context.guid, context.requested_depth, context.hide_process,
                    len(ret.guid_entity_map), len(ret.relations))
        return ret
