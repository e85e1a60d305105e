#!/usr/bin/env python3
"""Database initialization script.

Creates the Taxxy schema (corrections, transactions, tax profiles) and
verifies the expected tables and indexes exist.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from sqlalchemy import inspect

from taxxy.config import get_config
from taxxy.database.schema import init_database

EXPECTED_TABLES = ["corrections", "tax_profiles", "transactions"]
EXPECTED_CORRECTION_INDEXES = ["idx_corrections_user_recent"]


def main():
    """Initialize database and verify setup."""
    print("=" * 50)
    print("Taxxy Database Initialization")
    print("=" * 50)
    print()

    try:
        config = get_config()
        db_path = config.database_path
        print(f"Database path: {db_path}")

        db_path.parent.mkdir(parents=True, exist_ok=True)
        print(f"✓ Database directory ready: {db_path.parent}")

        print()
        print("Initializing database schema...")
        engine = init_database(db_path, echo=False)
        print("✓ Database initialized successfully")

        print()
        print("Verifying database schema...")
        inspector = inspect(engine)
        tables = inspector.get_table_names()

        print(f"Found {len(tables)} table(s):")
        for table in sorted(tables):
            marker = "✓" if table in EXPECTED_TABLES else "?"
            print(f"  {marker} {table}")

        missing_tables = [t for t in EXPECTED_TABLES if t not in tables]
        if missing_tables:
            print()
            print(f"⚠ Warning: Some expected tables are missing: {missing_tables}")
        else:
            print()
            print("✓ All expected tables are present")

        if "corrections" in tables:
            indexes = [idx["name"] for idx in inspector.get_indexes("corrections")]
            print()
            print("Indexes on corrections:")
            for idx in sorted(indexes):
                marker = "✓" if idx in EXPECTED_CORRECTION_INDEXES else "?"
                print(f"  {marker} {idx}")

        print()
        print("=" * 50)
        print("Database initialization completed successfully!")
        print("=" * 50)
        return 0

    except Exception as e:
        print()
        print("=" * 50)
        print(f"❌ Error initializing database: {e}")
        print("=" * 50)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
