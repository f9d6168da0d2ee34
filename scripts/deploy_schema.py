#!/usr/bin/env python
# ============================================================================
# SCHEMA DEPLOYMENT SCRIPT
# ============================================================================
# PURPOSE: Deploy the workflow document schema to PostgreSQL
# USAGE:
#   python scripts/deploy_schema.py --dry-run    # Preview SQL
#   python scripts/deploy_schema.py              # Execute deployment
# ============================================================================

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.logging import configure_logging
from infrastructure import DatabaseInitializer


def main():
    parser = argparse.ArgumentParser(
        description="Deploy the workflow document schema to PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/deploy_schema.py --dry-run     # Print DDL without executing
  python scripts/deploy_schema.py               # Deploy schema

Environment Variables:
  DATABASE_URL          Full PostgreSQL connection string
  POSTGRES_HOST         Database host (default: localhost)
  POSTGRES_DB           Database name (default: postgres)
  POSTGRES_USER         Database user (default: postgres)
  POSTGRES_PASSWORD     Database password
  POSTGRES_PORT         Database port (default: 5432)
  POSTGRES_SSLMODE      SSL mode (default: require)
  CWS_DB_SCHEMA         Target schema (default: cws)
        """
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--schema",
        type=str,
        help="Target schema (overrides CWS_DB_SCHEMA)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    args = parser.parse_args()

    configure_logging(level="DEBUG" if args.verbose else "INFO")

    initializer = DatabaseInitializer(connection_string=args.connection, schema_name=args.schema)

    print("=" * 70)
    print("WORKFLOW STORE - Schema Deployment")
    print(f"Schema: {initializer.schema_name}")
    print(f"Mode: {'DRY RUN' if args.dry_run else 'EXECUTE'}")
    print("=" * 70)

    result = initializer.initialize_all(dry_run=args.dry_run)

    if args.dry_run:
        for step in result.steps:
            for statement in step.details.get("statements", []):
                print(f"{statement};\n")

    print("\n[RESULTS]\n")
    for step in result.steps:
        print(f"[{step.status.upper()}] {step.name}: {step.message}")
        if step.error:
            print(f"   Error: {step.error}")

    print("\n" + "=" * 70)
    if not result.success:
        print("Deployment failed!")
        for error in result.errors:
            print(f"   - {error}")
        sys.exit(1)
    print("Deployment completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
