"""Metamodel loading utilities."""
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from ..errors import TypeModelError


class MetamodelLoader:
    """Loads the lineage type model and seed lineage data from YAML."""

    def __init__(self, config_dir: Optional[Path] = None, type_model: str = "type_model.yaml", seed: str = "seed_lineage.yaml"):
        """
        Initialize the metamodel loader.

        Args:
            config_dir: Directory containing the metamodel files (defaults to the bundled one)
            type_model: Filename of the type model inside config_dir
            seed: Filename of the seed lineage data inside config_dir
        """
        if config_dir is None:
            config_dir = Path(__file__).parent
        self.config_dir = Path(config_dir)
        self.type_model_path = self.config_dir / type_model
        self.seed_path = self.config_dir / seed

    def load_type_model(self) -> Dict[str, Any]:
        """
        Load the entity type model.

        Returns:
            Dictionary with categories, edge_labels and entity_types
        """
        return load_yaml(self.type_model_path)

    def load_seed(self) -> Dict[str, Any]:
        """
        Load the seed lineage data.

        Returns:
            Dictionary containing assets (by type name) and relationships
        """
        return load_yaml(self.seed_path)


def load_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeModelError(f"{path} must contain a YAML mapping, got {type(data).__name__}")
    return data
