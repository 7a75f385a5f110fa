"""
Type Taxonomy Configuration Loader

Loads type_model.yaml and classifies entity types as dataset-like or
process-like by membership of a category marker in the closure of the type
and all of its supertypes. The closure is computed once at load time so
classification during traversal is a set lookup.
"""

from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set
from dataclasses import dataclass

from ..errors import TypeModelError
from ..metamodel.loader import MetamodelLoader, load_yaml

DEFAULT_DATASET_MARKER = "DataSet"
DEFAULT_PROCESS_MARKER = "Process"
DEFAULT_PROCESS_INPUTS_EDGE = "consumes-input"
DEFAULT_PROCESS_OUTPUTS_EDGE = "produces-output"


@dataclass(frozen=True)
class EdgeLabels:
    """Labels of the two process -> dataset edge kinds"""
    process_inputs: str = DEFAULT_PROCESS_INPUTS_EDGE
    process_outputs: str = DEFAULT_PROCESS_OUTPUTS_EDGE

    def for_direction(self, is_upstream: bool):
        """
        Return (incoming, outgoing) labels for expanding a dataset vertex.

        Upstream: processes that produced the dataset, then what they consumed.
        Downstream: processes that consumed the dataset, then what they produced.
        """
        if is_upstream:
            return self.process_outputs, self.process_inputs
        return self.process_inputs, self.process_outputs


@dataclass(frozen=True)
class EntityTypeInfo:
    """Entity type metadata"""
    name: str
    super_types: List[str]
    all_super_types: FrozenSet[str]  # the type itself plus every transitive supertype


class TypeTaxonomy:
    """
    Loads and provides access to the entity type hierarchy.

    This is the single source of truth for which types take part in
    lineage and on which side of the dataset/process bipartition.
    """

    def __init__(self, config: Optional[Dict] = None, config_path: Optional[Path] = None):
        """
        Initialize taxonomy from a parsed config or a config file.

        Args:
            config: Already parsed type model mapping
            config_path: Path to type_model.yaml. If neither is given, uses the bundled model.
        """
        if config is None:
            if config_path is None:
                loader = MetamodelLoader()
                config_path = loader.type_model_path
                config = loader.load_type_model()
            else:
                config = load_yaml(Path(config_path))

        self.config_path = config_path
        self.config = config

        categories = config.get('categories') or {}
        self.dataset_marker = categories.get('dataset', DEFAULT_DATASET_MARKER)
        self.process_marker = categories.get('process', DEFAULT_PROCESS_MARKER)

        labels = config.get('edge_labels') or {}
        self.edge_labels = EdgeLabels(
            process_inputs=labels.get('process_inputs', DEFAULT_PROCESS_INPUTS_EDGE),
            process_outputs=labels.get('process_outputs', DEFAULT_PROCESS_OUTPUTS_EDGE)
        )
        if self.edge_labels.process_inputs == self.edge_labels.process_outputs:
            raise TypeModelError("edge_labels.process_inputs and process_outputs must differ")

        self.entity_types: Dict[str, EntityTypeInfo] = self._parse_entity_types()

    def _parse_entity_types(self) -> Dict[str, EntityTypeInfo]:
        """Parse type definitions and compute supertype closures"""
        raw_types = self.config.get('entity_types') or {}
        if not isinstance(raw_types, dict):
            raise TypeModelError("'entity_types' must be a mapping of type name -> definition")

        direct: Dict[str, List[str]] = {}
        for type_name, type_def in raw_types.items():
            super_types = (type_def or {}).get('super_types') or []
            if isinstance(super_types, str):
                super_types = [super_types]
            for super_type in super_types:
                if super_type not in raw_types:
                    raise TypeModelError(f"Type {type_name} extends unknown type {super_type}")
            direct[type_name] = list(super_types)

        closures: Dict[str, FrozenSet[str]] = {}
        for type_name in direct:
            self._resolve_closure(type_name, direct, closures, [])

        return {
            type_name: EntityTypeInfo(
                name=type_name,
                super_types=direct[type_name],
                all_super_types=closures[type_name]
            )
            for type_name in direct
        }

    def _resolve_closure(
        self,
        type_name: str,
        direct: Dict[str, List[str]],
        closures: Dict[str, FrozenSet[str]],
        stack: List[str]
    ) -> FrozenSet[str]:
        if type_name in closures:
            return closures[type_name]
        if type_name in stack:
            cycle = ' -> '.join(stack[stack.index(type_name):] + [type_name])
            raise TypeModelError(f"Cycle in type hierarchy: {cycle}")

        stack.append(type_name)
        closure: Set[str] = {type_name}
        for super_type in direct[type_name]:
            closure |= self._resolve_closure(super_type, direct, closures, stack)
        stack.pop()

        closures[type_name] = frozenset(closure)
        return closures[type_name]

    def get_type_and_all_super_types(self, type_name: str) -> FrozenSet[str]:
        """Closure of a type; empty for unknown types"""
        info = self.entity_types.get(type_name)
        return info.all_super_types if info else frozenset()

    def is_known_type(self, type_name: str) -> bool:
        return type_name in self.entity_types

    def is_of_category(self, type_name: str, category_marker: str) -> bool:
        """Check whether a type transitively extends the category marker type"""
        return category_marker in self.get_type_and_all_super_types(type_name)

    def is_dataset(self, type_name: str) -> bool:
        return self.is_of_category(type_name, self.dataset_marker)

    def is_process(self, type_name: str) -> bool:
        return self.is_of_category(type_name, self.process_marker)

    def is_lineage_edge(self, label: str) -> bool:
        return label in (self.edge_labels.process_inputs, self.edge_labels.process_outputs)
