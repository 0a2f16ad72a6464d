#!/usr/bin/env python
# ============================================================================
# SCHEMA DEPLOYMENT SCRIPT
# ============================================================================
# PURPOSE: Deploy the sld schema to PostgreSQL using PydanticToSQL
# USAGE:
#   python scripts/deploy_schema.py --dry-run    # Preview SQL
#   python scripts/deploy_schema.py              # Execute deployment
#   python scripts/deploy_schema.py --rebuild    # Drop and recreate (data loss)
# ============================================================================

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.logging import configure_logging
from core.errors import RepositoryError
from repositories.schema import build_generator, deploy_schema


def main():
    parser = argparse.ArgumentParser(
        description="Deploy the SLD store schema to PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/deploy_schema.py --dry-run     # Preview DDL without executing
  python scripts/deploy_schema.py               # Deploy schema
  python scripts/deploy_schema.py --schema test # Deploy into another schema

Environment Variables:
  DATABASE_URL            Full PostgreSQL connection string
  POSTGRES_HOST           Database host (default: localhost)
  POSTGRES_DB             Database name (default: postgres)
  POSTGRES_USER           Database user (default: postgres)
  POSTGRES_PASSWORD       Database password
  POSTGRES_PORT           Database port (default: 5432)
  POSTGRES_SSLMODE        SSL mode (default: require)
  USE_MANAGED_IDENTITY    Authenticate with an Entra token (default: false)
  POSTGRES_IDENTITY_NAME  Database role of the managed identity
  SLD_SCHEMA              Target schema (default: sld)
  SLD_PARAM_TYPE_UPSERT   Add the unique symbolizer index (default: false)
        """
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing"
    )
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="DROP SCHEMA CASCADE before creating (destroys all data)"
    )
    parser.add_argument(
        "--schema",
        type=str,
        help="Schema name (overrides SLD_SCHEMA)"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    args = parser.parse_args()

    configure_logging(level="DEBUG" if args.verbose else "INFO")

    generator = build_generator(args.schema)

    print("=" * 70)
    print("SLD STORE - Schema Deployment")
    print("=" * 70)
    print(f"Schema: {generator.schema_name}")
    print(f"Unique symbolizer index: {generator.param_type_upsert}")
    print(f"Mode: {'DRY RUN' if args.dry_run else 'EXECUTE'}{' + REBUILD' if args.rebuild else ''}")
    print("=" * 70)

    if args.dry_run:
        statements = generator.generate_all()
        if args.rebuild:
            statements.insert(0, generator.generate_drop_schema())
        for stmt in statements:
            print(stmt.as_string(None).strip() + ";\n")
        print(f"{len(statements)} statements")
        return

    try:
        count = deploy_schema(
            connection_string=args.connection,
            rebuild=args.rebuild,
            schema=args.schema,
        )
    except RepositoryError as e:
        print(f"Deployment failed: {e}")
        sys.exit(1)

    print(f"Deployment completed: {count} statements executed")
    print("=" * 70)


if __name__ == "__main__":
    main()
