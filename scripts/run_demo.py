#!/usr/bin/env python
"""Run the fact store demonstration.

Usage:
    python -m scripts.run_demo
    python -m scripts.run_demo --qdrant-location :memory: --collection scratch

Needs OPENAI_API_KEY (or EMBEDDING_API_KEY / LLM_API_KEY) and a reachable
Qdrant, unless --qdrant-location points at an embedded store.
"""

import argparse
import asyncio
import sys

from factrag.config import get_settings
from factrag.demo import FIRST_QUESTION, SECOND_QUESTION, run_demo
from factrag.exceptions import FactRAGError
from factrag.logging_config import get_logger, setup_logging
from factrag.services import Services

logger = get_logger(__name__)


async def main_async(
    collection: str | None,
    qdrant_location: str | None,
) -> bool:
    """Build the services, run the demo, print both answers.

    Returns:
        True if every step succeeded.
    """
    settings = get_settings().model_copy(deep=True)
    if collection:
        settings.qdrant.collection_name = collection
    if qdrant_location:
        settings.qdrant.location = qdrant_location

    services = Services.from_settings(settings)
    try:
        report = await run_demo(services)
    except FactRAGError as e:
        logger.error(
            f"Demo aborted: {e.message}",
            extra={"error_code": e.code.value, "details": e.details},
        )
        return False
    finally:
        await services.close()

    print("\n" + "=" * 60)
    print(f"Q: {FIRST_QUESTION}")
    print(f"A: {report.first_answer.answer}")
    print(f"Q: {SECOND_QUESTION}")
    print(f"A: {report.second_answer.answer}")
    print("=" * 60)
    print(f"Ingested: {report.ingested}")
    print(f"Deleted: {report.deleted}")
    print(f"Left after delete: {[p.id for p in report.read_after_delete]}")

    return True


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Ingest facts, answer questions from them, then clean up",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--collection",
        default=None,
        help="Collection name (default from QDRANT_COLLECTION_NAME)",
    )
    parser.add_argument(
        "--qdrant-location",
        default=None,
        help="Embedded Qdrant location such as :memory:",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Log level",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines",
    )

    args = parser.parse_args()
    setup_logging(level=args.log_level, json_output=args.json_logs or None)

    ok = asyncio.run(main_async(args.collection, args.qdrant_location))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
