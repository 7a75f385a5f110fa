#!/usr/bin/env python3
"""Load lineage seed data into Neo4j."""
import sys
import argparse
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from catalog_lineage.errors import DataValidationError
from catalog_lineage.graph.loader import GraphLoader
from catalog_lineage.metamodel.loader import MetamodelLoader, load_yaml
from catalog_lineage.traversal.taxonomy import TypeTaxonomy
from catalog_lineage.utils import Config, get_type_model_path


def main():
    """Validate seed data against the type model and load it into Neo4j."""
    parser = argparse.ArgumentParser(description='Load lineage seed data into Neo4j')
    parser.add_argument(
        '--seed',
        type=Path,
        default=None,
        help='Seed YAML file (default: the bundled seed_lineage.yaml)'
    )
    parser.add_argument(
        '--keep-existing',
        action='store_true',
        help='Do not clear the graph before loading'
    )
    args = parser.parse_args()

    print("🚀 Starting graph setup...")

    print("\n📖 Loading type model...")
    taxonomy = TypeTaxonomy(config_path=get_type_model_path())
    print(f"   Entity types: {len(taxonomy.entity_types)}")
    print(f"   Edge labels: {taxonomy.edge_labels.process_inputs}, {taxonomy.edge_labels.process_outputs}")

    seed = load_yaml(args.seed) if args.seed else MetamodelLoader().load_seed()

    print(f"\n🔌 Connecting to Neo4j at {Config.NEO4J_URI}...")
    loader = GraphLoader(
        uri=Config.NEO4J_URI,
        user=Config.NEO4J_USER,
        password=Config.NEO4J_PASSWORD,
        taxonomy=taxonomy,
        database=Config.NEO4J_DATABASE
    )
    try:
        loader.load_all(data=seed, clear_first=not args.keep_existing, create_constraints=True)
    except DataValidationError as e:
        print(f"\n❌ Invalid seed data: {e}")
        sys.exit(1)
    finally:
        loader.close()

    print("\n✨ Graph setup complete!")


if __name__ == "__main__":
    main()
