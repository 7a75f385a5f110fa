"""Shared utility functions."""
import os
from pathlib import Path


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def get_package_root() -> Path:
    """
    Get the package root directory.

    Returns:
        Path to the catalog_lineage package
    """
    return Path(__file__).parent


def get_metamodel_path(filename: str = None) -> Path:
    """
    Get path to the bundled metamodel directory or file.

    Args:
        filename: Optional metamodel filename

    Returns:
        Path to metamodel directory or specific metamodel file
    """
    metamodel_dir = get_package_root() / "metamodel"
    if filename:
        return metamodel_dir / filename
    return metamodel_dir


def get_type_model_path() -> Path:
    """Type model to load: LINEAGE_TYPE_MODEL if set, else the bundled one."""
    if Config.LINEAGE_TYPE_MODEL:
        return Path(Config.LINEAGE_TYPE_MODEL)
    return get_metamodel_path("type_model.yaml")


class Config:
    """Configuration constants."""

    # Neo4j
    NEO4J_URI = os.getenv("NEO4J_URI", "bolt://localhost:7687")
    NEO4J_USER = os.getenv("NEO4J_USER", "neo4j")
    NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD", "password")
    NEO4J_DATABASE = os.getenv("NEO4J_DATABASE", "neo4j")

    # Lineage
    LINEAGE_USING_CYPHER = _env_flag("LINEAGE_USING_CYPHER")
    LINEAGE_TYPE_MODEL = os.getenv("LINEAGE_TYPE_MODEL", "")
    LINEAGE_DEFAULT_DEPTH = int(os.getenv("LINEAGE_DEFAULT_DEPTH", "3"))
    LINEAGE_MAX_VERTICES = int(os.getenv("LINEAGE_MAX_VERTICES", "0"))
    LINEAGE_EXPANDED_REQUIRE_BOTH_VISIBLE = _env_flag("LINEAGE_EXPANDED_REQUIRE_BOTH_VISIBLE")
