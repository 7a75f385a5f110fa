#!/usr/bin/env python3
"""Resolve lineage for an entity and print the result as JSON."""
import sys
import json
import logging
import argparse
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from catalog_lineage.errors import LineageError
from catalog_lineage.graph.memory import InMemoryGraphStore
from catalog_lineage.metamodel.loader import MetamodelLoader, load_yaml
from catalog_lineage.service import LineageService
from catalog_lineage.traversal.taxonomy import TypeTaxonomy
from catalog_lineage.utils import Config, get_type_model_path


def main():
    """Resolve lineage against Neo4j or an in-memory seed graph."""
    parser = argparse.ArgumentParser(description="Resolve the lineage graph around a dataset or process.")
    parser.add_argument("guid", help="Id of the root entity")
    parser.add_argument(
        "--direction",
        choices=["INPUT", "OUTPUT", "BOTH"],
        default="BOTH",
        help="Lineage direction (default: BOTH)"
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=Config.LINEAGE_DEFAULT_DEPTH,
        help=f"Dataset-to-dataset hops, 0 for unbounded (default: {Config.LINEAGE_DEFAULT_DEPTH})"
    )
    parser.add_argument("--hide-process", action="store_true", help="Collapse process entities")
    parser.add_argument("--attribute", action="append", default=[], help="Entity attribute to include (repeatable)")
    parser.add_argument(
        "--seed",
        type=Path,
        nargs="?",
        const=MetamodelLoader().seed_path,
        default=None,
        help="Resolve against an in-memory graph built from a seed file instead of Neo4j"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.seed:
        taxonomy = TypeTaxonomy(config_path=get_type_model_path())
        store = InMemoryGraphStore.from_seed(taxonomy, load_yaml(args.seed))
        service = LineageService(store, taxonomy)
    else:
        service = LineageService.from_config()

    try:
        lineage = service.resolve_lineage(
            args.guid,
            direction=args.direction,
            depth=args.depth,
            hide_process=args.hide_process,
            attributes=args.attribute
        )
    except LineageError as e:
        print(f"❌ {type(e).__name__} ({e.http_status}): {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        close = getattr(service.store, "close", None)
        if close is not None:
            close()

    print(json.dumps(lineage.to_dict(), indent=2))


if __name__ == "__main__":
    main()
