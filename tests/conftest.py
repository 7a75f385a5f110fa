"""
Pytest configuration and fixtures for lineage tests.

Graphs are built in memory; every process edge gets a deterministic
relationship id "<process>:<label>:<dataset>".
"""

import pytest
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from catalog_lineage.graph.memory import InMemoryGraphStore
from catalog_lineage.metamodel.loader import MetamodelLoader
from catalog_lineage.service import LineageService
from catalog_lineage.traversal.taxonomy import TypeTaxonomy

INPUTS = "consumes-input"
OUTPUTS = "produces-output"


@pytest.fixture(scope="session")
def taxonomy():
    """Load the bundled type model"""
    return TypeTaxonomy()


@pytest.fixture
def build_graph(taxonomy):
    """
    Return a builder: build_graph(processes, datasets=(), vertex_props=None, ...)

    processes maps a process id to (input dataset ids, output dataset ids).
    Datasets referenced by processes are created automatically.
    vertex_props maps a vertex id to extra properties.
    """
    def build(processes, datasets=(), dataset_type="Table", process_type="EtlJob", vertex_props=None):
        vertex_props = vertex_props or {}
        store = InMemoryGraphStore(taxonomy)

        dataset_ids = list(datasets)
        for inputs, outputs in processes.values():
            for dataset_id in list(inputs) + list(outputs):
                if dataset_id not in dataset_ids:
                    dataset_ids.append(dataset_id)

        for dataset_id in dataset_ids:
            store.add_vertex(dataset_id, dataset_type, name=dataset_id, **vertex_props.get(dataset_id, {}))
        for process_id in processes:
            store.add_vertex(process_id, process_type, name=process_id, **vertex_props.get(process_id, {}))

        for process_id, (inputs, outputs) in processes.items():
            for dataset_id in inputs:
                store.add_edge(INPUTS, process_id, dataset_id, relationship_id=f"{process_id}:{INPUTS}:{dataset_id}")
            for dataset_id in outputs:
                store.add_edge(OUTPUTS, process_id, dataset_id, relationship_id=f"{process_id}:{OUTPUTS}:{dataset_id}")
        return store

    return build


@pytest.fixture
def chain_store(build_graph):
    """
    A <- P1 <- B <- P2 <- C

    P1 reads B and writes A, P2 reads C and writes B.
    """
    return build_graph({
        "P1": (["B"], ["A"]),
        "P2": (["C"], ["B"]),
    })


@pytest.fixture
def make_service(taxonomy):
    def make(store, **kwargs):
        return LineageService(store, taxonomy, **kwargs)
    return make


@pytest.fixture
def seed_store(taxonomy):
    """The bundled sample lineage graph"""
    return InMemoryGraphStore.from_seed(taxonomy, MetamodelLoader().load_seed())
