#!/usr/bin/env python3
"""
Initialize the backoffice database.

Applies every Alembic migration up to head against DATABASE_URL and lists
the resulting tables. Safe to run repeatedly.
"""
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import inspect

from backoffice.database import db
from backoffice.factory import create_app


def main():
    print("Applying database migrations...")
    app = create_app({"TESTING": False, "BACKOFFICE_DB_MIGRATE_ON_START": True})

    with app.app_context():
        tables = sorted(inspect(db.engine).get_table_names())
        print(f"Database ready with {len(tables)} tables:")
        for table in tables:
            print(f"  - {table}")


if __name__ == '__main__':
    main()
