"""Seed validation and Neo4j loading of lineage graphs."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from neo4j import GraphDatabase

from ..errors import DataValidationError
from ..traversal.taxonomy import TypeTaxonomy

logger = logging.getLogger(__name__)


# -----------------------------
# Seed validation
# -----------------------------

@dataclass(frozen=True)
class SeedRelationship:
    type: str
    from_id: str
    to_id: str
    relationship_id: Optional[str] = None


def _safe_ident(name: str) -> str:
    """
    Allow only simple Neo4j identifiers for labels.
    Prevents Cypher injection when we interpolate labels.
    """
    if not name or not all(c.isalnum() or c == "_" for c in name):
        raise DataValidationError(f"Unsafe identifier: {name!r}")
    return name


def quote_rel_type(label: str) -> str:
    """Backtick-quote a relationship type; lineage labels contain hyphens."""
    if not label or "`" in label:
        raise DataValidationError(f"Unsafe relationship type: {label!r}")
    return f"`{label}`"


def validate_seed(
    taxonomy: TypeTaxonomy,
    data: Dict[str, Any],
) -> Tuple[Dict[str, List[Dict[str, Any]]], List[SeedRelationship]]:
    """
    Validate seed lineage data against the type taxonomy.

    data: {"assets": {TypeName: [{id, ...}]}, "relationships": [{type, from, to, id?}]}

    Returns (assets by type name, relationships).
    """
    assets = data.get("assets") or {}
    if not isinstance(assets, dict):
        raise DataValidationError("Seed data must contain 'assets' as a mapping of TypeName -> list[objects].")

    types_by_id: Dict[str, str] = {}
    normalized: Dict[str, List[Dict[str, Any]]] = {}

    for type_name, items in assets.items():
        if not taxonomy.is_known_type(type_name):
            raise DataValidationError(f"Unknown entity type in assets: {type_name}")
        if not isinstance(items, list):
            raise DataValidationError(f"assets.{type_name} must be a list")

        out_items: List[Dict[str, Any]] = []
        for obj in items:
            if not isinstance(obj, dict):
                raise DataValidationError(f"assets.{type_name} contains a non-object: {obj!r}")
            _id = obj.get("id")
            if _id in (None, ""):
                raise DataValidationError(f"{type_name} missing required property 'id'. Offending object: {obj}")
            if _id in types_by_id:
                raise DataValidationError(f"Duplicate id in assets: {_id} ({types_by_id[_id]} and {type_name})")
            types_by_id[_id] = type_name
            out_items.append(obj)

        normalized[type_name] = out_items

    rels = data.get("relationships") or []
    if not isinstance(rels, list):
        raise DataValidationError("Seed data must contain 'relationships' as a list.")

    validated: List[SeedRelationship] = []
    seen_rel_ids = set()
    for r in rels:
        if not isinstance(r, dict):
            raise DataValidationError(f"Relationship must be an object: {r!r}")

        rtype = r.get("type")
        from_id = r.get("from")
        to_id = r.get("to")
        if not rtype or from_id is None or to_id is None:
            raise DataValidationError(f"Relationship missing fields (type/from/to): {r}")
        if not taxonomy.is_lineage_edge(rtype):
            raise DataValidationError(f"Unknown relationship type: {rtype}")

        for endpoint in (from_id, to_id):
            if endpoint not in types_by_id:
                raise DataValidationError(f"Relationship endpoint {endpoint!r} not found in assets: {r}")

        if not taxonomy.is_process(types_by_id[from_id]):
            raise DataValidationError(
                f"Relationship {rtype} must start at a process, {from_id} is {types_by_id[from_id]}"
            )
        if not taxonomy.is_dataset(types_by_id[to_id]):
            raise DataValidationError(
                f"Relationship {rtype} must end at a dataset, {to_id} is {types_by_id[to_id]}"
            )

        rel_id = r.get("id")
        if rel_id is not None:
            if rel_id in seen_rel_ids:
                raise DataValidationError(f"Duplicate relationship id: {rel_id}")
            seen_rel_ids.add(rel_id)

        validated.append(SeedRelationship(type=rtype, from_id=from_id, to_id=to_id, relationship_id=rel_id))

    return normalized, validated


# -----------------------------
# Loader
# -----------------------------

class GraphLoader:
    """Loads taxonomy-validated lineage seed data into Neo4j."""

    def __init__(self, uri: str, user: str, password: str, taxonomy: TypeTaxonomy, database: Optional[str] = None):
        self.driver = GraphDatabase.driver(uri, auth=(user, password))
        self.taxonomy = taxonomy
        self.database = database

    def close(self):
        self.driver.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _session(self):
        return self.driver.session(database=self.database)

    def clear_graph(self):
        logger.info("Clearing graph")
        with self._session() as session:
            session.run("MATCH (n) DETACH DELETE n")

    def create_constraints(self, type_names: List[str]):
        """Create uniqueness constraints on :Type(id) for every loaded type (Neo4j 5 syntax)."""
        with self._session() as session:
            for type_name in type_names:
                label = _safe_ident(type_name)
                cname = f"uniq_{label}_id"
                # labels cannot be parameters in schema commands
                session.run(f"CREATE CONSTRAINT {cname} IF NOT EXISTS FOR (n:{label}) REQUIRE n.id IS UNIQUE")

    def create_nodes(self, assets: Dict[str, List[Dict[str, Any]]]):
        """Create/merge one node per asset, labelled with its type name."""
        with self._session() as session:
            for type_name, rows in assets.items():
                if not rows:
                    continue
                label = _safe_ident(type_name)
                cypher = f"""
                UNWIND $rows AS row
                MERGE (n:{label} {{id: row.id}})
                SET n += row
                """
                session.run(cypher, {"rows": rows})
                logger.info("Loaded %d %s nodes", len(rows), label)

    def create_relationships(self, rels: List[SeedRelationship]):
        """Create process -> dataset relationships after nodes exist."""
        with self._session() as session:
            buckets: Dict[str, List[Dict[str, Any]]] = {}
            for r in rels:
                buckets.setdefault(r.type, []).append({
                    "from_id": r.from_id,
                    "to_id": r.to_id,
                    "relationship_id": r.relationship_id or str(uuid.uuid4()),
                })

            for rtype, rows in buckets.items():
                cypher = f"""
                UNWIND $rows AS row
                MATCH (a {{id: row.from_id}})
                MATCH (b {{id: row.to_id}})
                MERGE (a)-[r:{quote_rel_type(rtype)} {{relationship_id: row.relationship_id}}]->(b)
                """
                session.run(cypher, {"rows": rows})
                logger.info("Loaded %d %s relationships", len(rows), rtype)

    def load_all(self, data: Dict[str, Any], clear_first: bool = True, create_constraints: bool = True):
        """
        Complete graph loading pipeline using taxonomy validation.

        data: seed YAML loaded to dict (contains assets + relationships)
        """
        assets, rels = validate_seed(self.taxonomy, data)

        if clear_first:
            self.clear_graph()

        if create_constraints:
            self.create_constraints(list(assets.keys()))

        self.create_nodes(assets)
        self.create_relationships(rels)
        logger.info("Graph load complete: %d types, %d relationships", len(assets), len(rels))
