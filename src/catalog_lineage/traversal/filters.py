"""
Traversal filters.

Attribute conditions that restrict which vertices are visible during a
lineage traversal. A request's criteria are AND-combined into one predicate.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..errors import IncompatibleRequest
from ..graph.store import Vertex

TYPE_NAME_ATTRIBUTE = "__typeName"

VertexPredicate = Callable[[Vertex], bool]

_MISSING = object()


def _as_list(value) -> List[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": lambda actual, expected: actual is not _MISSING and actual == expected,
    "neq": lambda actual, expected: actual is _MISSING or actual != expected,
    "in": lambda actual, expected: actual is not _MISSING and actual in _as_list(expected),
    "not_in": lambda actual, expected: actual is _MISSING or actual not in _as_list(expected),
    "startswith": lambda actual, expected: isinstance(actual, str) and actual.startswith(str(expected)),
    "contains": lambda actual, expected: (
        expected in actual if isinstance(actual, (list, tuple, set))
        else isinstance(actual, str) and str(expected) in actual
    ),
    "exists": lambda actual, expected: (actual is not _MISSING and actual is not None) == (expected is None or bool(expected)),
}


@dataclass(frozen=True)
class FilterCriteria:
    attribute: str
    operator: str
    value: Any = None

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise IncompatibleRequest(
                f"Unsupported filter operator {self.operator!r}. Allowed: {sorted(OPERATORS)}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterCriteria":
        try:
            return cls(attribute=data["attributeName"], operator=data["operator"], value=data.get("attributeValue"))
        except KeyError as e:
            raise IncompatibleRequest(f"Filter criteria missing {e.args[0]!r}: {data}") from e

    def matches(self, vertex: Vertex) -> bool:
        if self.attribute == TYPE_NAME_ATTRIBUTE:
            actual = vertex.type_name
        else:
            actual = vertex.properties.get(self.attribute, _MISSING)
        return OPERATORS[self.operator](actual, self.value)


def build_predicate(criteria: Optional[Iterable[Union[FilterCriteria, Dict[str, Any]]]]) -> VertexPredicate:
    """Combine criteria into a single vertex predicate; no criteria admits everything"""
    parsed = [c if isinstance(c, FilterCriteria) else FilterCriteria.from_dict(c) for c in (criteria or [])]

    if not parsed:
        return lambda vertex: True

    def predicate(vertex: Vertex) -> bool:
        return all(c.matches(vertex) for c in parsed)

    return predicate
