"""
Lineage graph access.

This package provides:
- The graph access port (vertices, edges, store protocol)
- An in-memory store and a Neo4j-backed store
- Seed data validation and a Neo4j seed loader
"""

from .store import Edge, EdgeDirection, GraphStore, Vertex
from .memory import InMemoryGraphStore
from .neo4j_store import Neo4jGraphStore
from .loader import GraphLoader, validate_seed

__all__ = [
    'Edge', 'EdgeDirection', 'GraphStore', 'Vertex',
    'InMemoryGraphStore', 'Neo4jGraphStore', 'GraphLoader', 'validate_seed'
]
