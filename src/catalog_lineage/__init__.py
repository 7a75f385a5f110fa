"""Lineage resolution for a metadata catalog."""

from .errors import (
    EntityNotFound,
    IncompatibleRequest,
    LineageError,
    NotAuthorized,
    TraversalBackendFailure,
    TraversalLimitExceeded,
    UnsupportedEntityType,
)
from .service import LineageService
from .traversal.model import LineageDirection, LineageGraph, LineageRelation

__all__ = [
    'LineageService', 'LineageDirection', 'LineageGraph', 'LineageRelation',
    'LineageError', 'EntityNotFound', 'UnsupportedEntityType', 'IncompatibleRequest',
    'NotAuthorized', 'TraversalBackendFailure', 'TraversalLimitExceeded',
]
