"""
Lineage traversal package.

This package provides:
- Entity type taxonomy (dataset/process classification)
- Request normalization into an immutable traversal context
- The native breadth-first traversal engine and the Cypher adapter
- Relation assembly with optional process hiding
"""

from .taxonomy import TypeTaxonomy
from .model import EntityHeader, LineageDirection, LineageGraph, LineageRelation
from .context import LineageContext, LineageRequest, LineageRequestNormalizer
from .engine import TraversalEngine
from .cypher import CypherTraversalAdapter

__all__ = [
    'TypeTaxonomy', 'EntityHeader', 'LineageDirection', 'LineageGraph', 'LineageRelation',
    'LineageContext', 'LineageRequest', 'LineageRequestNormalizer',
    'TraversalEngine', 'CypherTraversalAdapter'
]
