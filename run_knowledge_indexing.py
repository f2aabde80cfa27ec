"""Index conversations and transcripts into the knowledge base."""
import argparse
import asyncio
import logging

from recall.features.knowledge import get_knowledge_service
from recall.shared.logging_config import setup_logging

logger = logging.getLogger("Recall.Indexing")

SOURCE_TYPES = ["conversation", "transcript"]


async def main(source_types: list):
    knowledge = await get_knowledge_service()
    all_results = {}

    # Index each type separately so one failing source doesn't block the other
    for source_type in source_types:
        print(f"\n{'='*50}")
        print(f"Indexing {source_type}s...")
        print(f"{'='*50}")
        try:
            result = await knowledge.index_all(source_type)
            all_results[source_type] = result
            print(f"✓ {source_type}: indexed={result.indexed}, failed={result.failed}")
            for error in result.errors:
                print(f"    - {error}")
        except Exception as e:
            logger.error(f"Indexing {source_type} aborted: {e}")
            print(f"✗ {source_type}: FAILED - {e}")
            all_results[source_type] = None

    print(f"\n{'='*50}")
    print("FINAL RESULTS:")
    print(f"{'='*50}")
    for t, r in all_results.items():
        if r is None:
            print(f"  ✗ {t}: aborted")
        else:
            print(f"  ✓ {t}: indexed={r.indexed}, failed={r.failed}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "source_types",
        nargs="*",
        choices=SOURCE_TYPES,
        default=SOURCE_TYPES,
        help="Source types to index (default: all)",
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(main(args.source_types))
