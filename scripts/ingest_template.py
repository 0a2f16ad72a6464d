#!/usr/bin/env python
# ============================================================================
# TEMPLATE INGESTION SCRIPT
# ============================================================================
# PURPOSE: Store an SLD template and its flat field file in one transaction
# USAGE:
#   python scripts/ingest_template.py template.sld fields.tsv
#   python scripts/ingest_template.py template.sld fields.tsv --name roads
# ============================================================================

import sys
import os
import argparse
import asyncio
import json

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.errors import IngestError, RepositoryError
from core.logging import configure_logging, get_logger, ComponentType
from repositories import UnitOfWork
from services import SldService

logger = get_logger("scripts.ingest_template", ComponentType.SCRIPT)


async def ingest(args) -> int:
    with open(args.template, encoding="utf-8") as f:
        content = f.read()
    with open(args.fields, encoding="utf-8") as f:
        lines = f.read().splitlines()

    name = args.name or os.path.splitext(os.path.basename(args.template))[0]

    service = SldService(uow_factory=lambda: UnitOfWork(conninfo=args.connection))
    result = await service.ingest_template(
        content=content,
        name=name,
        lines=lines,
        uuid=args.uuid,
        sld_filename=os.path.basename(args.template),
    )

    print(json.dumps(result.to_dict(), indent=2))
    return result.template_id


def main():
    parser = argparse.ArgumentParser(
        description="Store an SLD template and its structure",
    )
    parser.add_argument("template", help="Template file with placeholders")
    parser.add_argument("fields", help="Flat field file produced by the SLD parser")
    parser.add_argument("--name", type=str, help="Template name (default: file name)")
    parser.add_argument("--uuid", type=str, help="Uploader token")
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    configure_logging(level="DEBUG" if args.verbose else "INFO")

    try:
        asyncio.run(ingest(args))
    except IngestError as e:
        logger.error(f"Invalid field file: {e}")
        sys.exit(2)
    except RepositoryError as e:
        logger.error(f"Ingestion failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
