"""
Migration script: legacy JSON export (Settings -> Export All Data) -> database.

Usage:
    python -m incubator.migrate_export export.json
    python -m incubator.migrate_export export.json --database-url sqlite+aiosqlite:///./local.db
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from incubator import config
from incubator.database import Database
from incubator.importer import import_bundle
from incubator.repository import SQLAlchemyStartupRepository
from incubator.schemas import ImportSummary

logger = logging.getLogger(__name__)


def load_export(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


async def migrate(data: dict, database_url: str) -> ImportSummary:
    database = Database(database_url, echo=config.DATABASE_ECHO)
    try:
        print("Initialising database schema ...")
        await database.init_db()
        async with database.session() as session:
            return await import_bundle(data, SQLAlchemyStartupRepository(session))
    finally:
        await database.dispose()


def print_summary(summary: ImportSummary):
    print("Migration complete.")
    print(f"  Startups created:          {summary.startups_created}")
    print(f"  Startups updated:          {summary.startups_updated}")
    print(f"  Achievements migrated:     {summary.achievements_migrated}")
    print(f"  Progress records migrated: {summary.progress_records_migrated}")
    print(f"  SMC meetings migrated:     {summary.smc_meetings_migrated}")
    print(f"  One-on-one meetings:       {summary.one_on_one_meetings_migrated}")
    print(f"  Schedules skipped:         {summary.schedules_skipped}")
    if summary.errors:
        print(f"  Errors: {len(summary.errors)}")
        for err in summary.errors:
            print(f"    - {err.record}: {err.message}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import a legacy export JSON file")
    parser.add_argument("export", help="path to the exported JSON file")
    parser.add_argument("--database-url", default=config.DATABASE_URL)
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    export_path = Path(args.export).resolve()
    if not export_path.exists():
        logger.error("File not found: %s", export_path)
        return 1

    try:
        data = load_export(export_path)
    except (OSError, ValueError) as e:
        logger.error("Could not read %s: %s", export_path, e)
        return 1

    database_url = config.resolve_database_url(args.database_url)
    try:
        summary = asyncio.run(migrate(data, database_url))
    except Exception as e:
        logger.exception("Migration failed: %s", e)
        return 1

    print_summary(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
