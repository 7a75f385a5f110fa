"""
Lineage error taxonomy.

Every error raised to callers of the lineage service derives from
LineageError and carries the HTTP status a REST layer should map it to.
"""


class LineageError(Exception):
    """Base class for errors surfaced by lineage resolution"""

    http_status = 500

    def __init__(self, message: str, guid: str = None):
        super().__init__(message)
        self.guid = guid


class EntityNotFound(LineageError):
    """The root id does not resolve to a vertex"""

    http_status = 404


class UnsupportedEntityType(LineageError):
    """The root is neither dataset-like nor process-like"""

    http_status = 400


class IncompatibleRequest(UnsupportedEntityType):
    """The request parameters cannot be honored for this root"""


class NotAuthorized(LineageError):
    """The single up-front authorization check denied access"""

    http_status = 403


class TraversalBackendFailure(LineageError):
    """The graph store or the Cypher execution failed"""


class TraversalLimitExceeded(TraversalBackendFailure):
    """The traversal expanded more vertices than the configured budget"""


class TypeModelError(ValueError):
    pass


class DataValidationError(ValueError):
    pass
