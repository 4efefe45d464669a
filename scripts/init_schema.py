#!/usr/bin/env python3
"""
Create the attendance tables on DATABASE_URL.

  python scripts/init_schema.py            # create missing tables (+ RLS on Postgres)
  python scripts/init_schema.py --dry-run  # print the DDL only
"""
import argparse
import logging

from sqlalchemy import text
from sqlalchemy.schema import CreateTable

from garage.db import get_engine
from garage.schema import RLS_STATEMENTS, metadata

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("init_schema")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create the locations and attendance_reports tables.")
    p.add_argument("--database-url", default=None, help="Overrides DATABASE_URL from the environment")
    p.add_argument("--dry-run", action="store_true", help="Print the CREATE TABLE statements and exit")
    p.add_argument("--skip-rls", action="store_true", help="Do not enable row-level security (Postgres only)")
    return p.parse_args()


def init_schema(engine, *, rls: bool = True) -> None:
    metadata.create_all(engine)
    log.info("Tables ready: %s", ", ".join(metadata.tables))
    if rls and engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            for stmt in RLS_STATEMENTS:
                conn.execute(text(stmt))
        log.info("Row-level security enabled for authenticated users")


def main() -> None:
    args = parse_args()
    engine = get_engine(args.database_url)
    if args.dry_run:
        for table in metadata.sorted_tables:
            print(str(CreateTable(table).compile(engine)).strip() + ";\n")
        return
    init_schema(engine, rls=not args.skip_rls)


if __name__ == "__main__":
    main()
