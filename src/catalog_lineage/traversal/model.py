"""Lineage result model."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class LineageDirection(str, Enum):
    """Which side of the root to trace"""
    INPUT = "INPUT"    # upstream: what produced the root
    OUTPUT = "OUTPUT"  # downstream: what the root produced
    BOTH = "BOTH"

    @classmethod
    def parse(cls, value) -> "LineageDirection":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


@dataclass
class EntityHeader:
    """Projected summary of an entity in the lineage result"""
    guid: str
    type_name: str
    status: str = "ACTIVE"
    display_text: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    classification_names: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guid": self.guid,
            "typeName": self.type_name,
            "status": self.status,
            "displayText": self.display_text,
            "attributes": self.attributes,
            "classificationNames": self.classification_names,
        }


@dataclass(frozen=True)
class LineageRelation:
    """
    One relation of the lineage graph, oriented along the data flow.

    process_id is only set for relations compressed through a hidden process.
    """
    from_entity_id: str
    to_entity_id: str
    relationship_id: Optional[str] = None
    process_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        ret = {
            "fromEntityId": self.from_entity_id,
            "toEntityId": self.to_entity_id,
            "relationshipId": self.relationship_id,
        }
        if self.process_id is not None:
            ret["processId"] = self.process_id
        return ret


@dataclass
class LineageGraph:
    """Result of a lineage resolution"""
    base_entity_guid: str
    lineage_direction: LineageDirection
    lineage_depth: int
    guid_entity_map: Dict[str, EntityHeader] = field(default_factory=dict)
    relations: Set[LineageRelation] = field(default_factory=set)
    _relationship_ids: Set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self):
        for relation in self.relations:
            if relation.relationship_id is not None:
                self._relationship_ids.add(relation.relationship_id)

    def add_relation(self, relation: LineageRelation) -> None:
        self.relations.add(relation)
        if relation.relationship_id is not None:
            self._relationship_ids.add(relation.relationship_id)

    def contains_relationship(self, relationship_id: Optional[str]) -> bool:
        """True if a relation with this relationship id was already recorded"""
        return relationship_id is not None and relationship_id in self._relationship_ids

    def merge(self, other: "LineageGraph") -> None:
        """Union another result into this one; later entity projections win"""
        self.guid_entity_map.update(other.guid_entity_map)
        for relation in other.relations:
            self.add_relation(relation)

    def missing_entity_ids(self) -> Set[str]:
        """Relation endpoints with no entry in the entity map"""
        referenced = set()
        for relation in self.relations:
            referenced.add(relation.from_entity_id)
            referenced.add(relation.to_entity_id)
        return referenced - self.guid_entity_map.keys()

    def to_dict(self) -> Dict[str, Any]:
        relations = sorted(
            self.relations,
            key=lambda r: (r.from_entity_id, r.to_entity_id, r.relationship_id or "", r.process_id or "")
        )
        return {
            "baseEntityGuid": self.base_entity_guid,
            "lineageDirection": self.lineage_direction.value,
            "lineageDepth": self.lineage_depth,
            "guidEntityMap": {guid: header.to_dict() for guid, header in self.guid_entity_map.items()},
            "relations": [r.to_dict() for r in relations],
        }
