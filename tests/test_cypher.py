"""
Tests for the Cypher traversal adapter.

Query execution is faked: the store records the query and bindings and
returns canned edges, so these tests cover query construction and result
assembly without a database.
"""

import pytest

from catalog_lineage.errors import IncompatibleRequest, TraversalBackendFailure, TraversalLimitExceeded
from catalog_lineage.graph.store import EdgeDirection
from catalog_lineage.traversal.context import UNBOUNDED, LineageRequest
from catalog_lineage.traversal.cypher import CypherTraversalAdapter
from catalog_lineage.traversal.model import LineageDirection


class ScriptStore:
    """Wraps an in-memory store; execute_script answers by incoming edge label"""

    def __init__(self, store):
        self.store = store
        self.calls = []
        self.responses = {}

    def find_vertex_by_id(self, vertex_id):
        return self.store.find_vertex_by_id(vertex_id)

    def edges(self, vertex, direction, label):
        return self.store.edges(vertex, direction, label)

    def is_of_category(self, type_name, category_marker):
        return self.store.is_of_category(type_name, category_marker)

    def execute_script(self, script, bindings):
        self.calls.append((script, dict(bindings)))
        return list(self.responses.get(bindings["incomingEdgeLabel"], []))


def process_edges(store, *process_ids):
    ret = []
    for process_id in process_ids:
        process = store.find_vertex_by_id(process_id)
        for label in ("consumes-input", "produces-output"):
            ret.extend(store.edges(process, EdgeDirection.OUT, label))
    return ret


def pairs(lineage):
    return {(r.from_entity_id, r.to_entity_id) for r in lineage.relations}


@pytest.fixture
def adapter(chain_store, taxonomy):
    return CypherTraversalAdapter(chain_store, taxonomy)


class TestQueryConstruction:
    def test_dataset_upstream_bounded(self, adapter):
        bindings = {}
        query = adapter.get_lineage_query("A", LineageDirection.INPUT, 2, True, bindings)

        assert bindings == {
            "guid": "A",
            "incomingEdgeLabel": "produces-output",
            "outgoingEdgeLabel": "consumes-input",
            "dataSetDepth": 2,
            "processDepth": 1,
        }
        assert "{1,2}" in query
        assert "$guid" in query

    def test_dataset_downstream_labels(self, adapter):
        bindings = {}
        adapter.get_lineage_query("A", LineageDirection.OUTPUT, 3, True, bindings)

        assert bindings["incomingEdgeLabel"] == "consumes-input"
        assert bindings["outgoingEdgeLabel"] == "produces-output"

    def test_dataset_unbounded(self, adapter):
        bindings = {}
        query = adapter.get_lineage_query("A", LineageDirection.INPUT, UNBOUNDED, True, bindings)

        assert "{1,}" in query
        assert bindings["dataSetDepth"] == UNBOUNDED
        assert bindings["processDepth"] == UNBOUNDED

    def test_process_root_bounded(self, adapter):
        bindings = {}
        query = adapter.get_lineage_query("P1", LineageDirection.INPUT, 3, False, bindings)

        assert "{0,2}" in query
        assert "type(first) = $outgoingEdgeLabel" in query
        assert bindings["processDepth"] == 2

    def test_process_root_depth_one(self, adapter):
        query = adapter.get_lineage_query("P1", LineageDirection.OUTPUT, 1, False, {})

        assert "{0,0}" in query

    def test_process_root_unbounded(self, adapter):
        query = adapter.get_lineage_query("P1", LineageDirection.OUTPUT, UNBOUNDED, False, {})

        assert "{0,}" in query

    def test_both_rejected(self, adapter):
        with pytest.raises(ValueError):
            adapter.get_lineage_query("A", LineageDirection.BOTH, 3, True, {})


class TestResultAssembly:
    def test_upstream_edges_become_relations(self, chain_store, make_service):
        store = ScriptStore(chain_store)
        edges = process_edges(chain_store, "P1", "P2")
        store.responses["produces-output"] = edges + edges[:1]
        service = make_service(store, use_cypher=True)

        lineage = service.resolve_lineage("A", direction="INPUT", depth=0)

        assert pairs(lineage) == {("B", "P1"), ("P1", "A"), ("C", "P2"), ("P2", "B")}
        assert set(lineage.guid_entity_map) == {"A", "P1", "B", "P2", "C"}
        assert lineage.lineage_direction == LineageDirection.INPUT
        assert len(store.calls) == 1
        assert store.calls[0][1]["dataSetDepth"] == UNBOUNDED

    def test_both_runs_two_queries(self, chain_store, make_service):
        store = ScriptStore(chain_store)
        store.responses["produces-output"] = process_edges(chain_store, "P2")
        store.responses["consumes-input"] = process_edges(chain_store, "P1")
        service = make_service(store, use_cypher=True)

        lineage = service.resolve_lineage("B", direction="BOTH", depth=1)

        assert [bindings["incomingEdgeLabel"] for _, bindings in store.calls] == ["produces-output", "consumes-input"]
        assert lineage.lineage_direction == LineageDirection.BOTH
        assert pairs(lineage) == {("C", "P2"), ("P2", "B"), ("B", "P1"), ("P1", "A")}

    def test_walk_stops_at_invisible_datasets(self, build_graph, make_service):
        """
        A <- P1 <- B <- P2 <- C <- P3 <- D with B and C deleted.

        The B <- P2 <- C pair has no visible dataset, so nothing past it is
        reported, even though the query returned the P3 edges.
        """
        inner = build_graph(
            {"P1": (["B"], ["A"]), "P2": (["C"], ["B"]), "P3": (["D"], ["C"])},
            vertex_props={"B": {"status": "DELETED"}, "C": {"status": "DELETED"}}
        )
        store = ScriptStore(inner)
        store.responses["produces-output"] = process_edges(inner, "P1", "P2", "P3")

        lineage = make_service(store, use_cypher=True).resolve_lineage("A", direction="INPUT", depth=0)

        assert pairs(lineage) == {("B", "P1"), ("P1", "A")}
        assert set(lineage.guid_entity_map) == {"A", "P1", "B"}

    def test_vertex_budget(self, chain_store, make_service):
        store = ScriptStore(chain_store)
        store.responses["produces-output"] = process_edges(chain_store, "P1", "P2")

        with pytest.raises(TraversalLimitExceeded):
            make_service(store, use_cypher=True, max_vertices=1).resolve_lineage("A", direction="INPUT", depth=0)


class TestNativeEquivalence:
    """Given every edge the pattern can match, both strategies resolve the same lineage"""

    def resolve_both_ways(self, inner, taxonomy, make_service, root, direction, depth, **service_kwargs):
        process_ids = [v.id for v in inner.vertices.values() if taxonomy.is_process(v.type_name)]
        edges = process_edges(inner, *process_ids)
        store = ScriptStore(inner)
        store.responses = {"produces-output": edges, "consumes-input": edges}

        native = make_service(inner, **service_kwargs).resolve_lineage(root, direction=direction, depth=depth)
        cypher = make_service(store, use_cypher=True, **service_kwargs).resolve_lineage(root, direction=direction, depth=depth)
        assert store.calls
        return native, cypher

    @pytest.mark.parametrize("root", ["tbl-001", "tbl-002", "tbl-003", "job-003", "dash-001"])
    @pytest.mark.parametrize("direction", ["INPUT", "OUTPUT", "BOTH"])
    @pytest.mark.parametrize("depth", [1, 2, 0])
    def test_seed_graph(self, seed_store, taxonomy, make_service, root, direction, depth):
        native, cypher = self.resolve_both_ways(seed_store, taxonomy, make_service, root, direction, depth)

        assert cypher.relations == native.relations
        assert set(cypher.guid_entity_map) == set(native.guid_entity_map)

    @pytest.mark.parametrize("require_both_visible", [False, True])
    @pytest.mark.parametrize("root, direction", [("A", "INPUT"), ("D", "OUTPUT"), ("B", "BOTH")])
    def test_invisible_intermediate_datasets(self, build_graph, taxonomy, make_service,
                                             require_both_visible, root, direction):
        inner = build_graph(
            {"P1": (["B"], ["A"]), "P2": (["C"], ["B"]), "P3": (["D"], ["C"])},
            vertex_props={"B": {"status": "DELETED"}, "C": {"status": "DELETED"}}
        )
        native, cypher = self.resolve_both_ways(
            inner, taxonomy, make_service, root, direction, 0, require_both_visible=require_both_visible
        )

        assert cypher.relations == native.relations
        assert set(cypher.guid_entity_map) == set(native.guid_entity_map)



class TestStrategySelection:
    def test_hide_process_uses_native_engine(self, chain_store, make_service):
        store = ScriptStore(chain_store)
        service = make_service(store, use_cypher=True)

        lineage = service.resolve_lineage("A", direction="INPUT", depth=0, hide_process=True)

        assert store.calls == []
        assert {r.process_id for r in lineage.relations} == {"P1", "P2"}

    def test_adapter_rejects_hide_process(self, chain_store, make_service):
        service = make_service(ScriptStore(chain_store), use_cypher=True)
        context = service.normalizer.normalize(LineageRequest(guid="A", hide_process=True))

        with pytest.raises(IncompatibleRequest):
            service.cypher_adapter.traverse(context)

    def test_in_memory_store_has_no_query_language(self, chain_store, make_service):
        service = make_service(chain_store, use_cypher=True)

        with pytest.raises(TraversalBackendFailure):
            service.resolve_lineage("A", direction="INPUT")
