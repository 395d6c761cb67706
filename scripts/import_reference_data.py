#!/usr/bin/env python3
"""
Import events, fighters or fights from a JSON or CSV dump.

Column names may vary between dumps; rows are normalised on the way in and
upserted by id. Import events and fighters before fights.

Usage:
    python scripts/import_reference_data.py {events|fighters|fights} <file.json|file.csv>

Example:
    python scripts/import_reference_data.py fighters data/fighters.csv
"""

import argparse
import asyncio
import csv
import json
import os
import sys
from pathlib import Path

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from fightpicks.database import db  # noqa: E402
from fightpicks.services import reference_data_service  # noqa: E402

IMPORTERS = {
    "events": reference_data_service.import_events,
    "fighters": reference_data_service.import_fighters,
    "fights": reference_data_service.import_fights,
}


def read_rows(path: Path) -> list[dict]:
    """Read a list of row dicts from a .json (array, or {"data": [...]}) or .csv file."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            payload = json.load(f)
            if isinstance(payload, dict):
                payload = payload.get("data", [])
            return list(payload)
        return list(csv.DictReader(f))


async def main():
    parser = argparse.ArgumentParser(description="Import fight reference data")
    parser.add_argument("kind", choices=sorted(IMPORTERS), help="What the file contains")
    parser.add_argument("file", help="Path to a JSON or CSV file")
    args = parser.parse_args()

    path = Path(args.file)
    if not path.exists():
        print(f"File not found: {path}")
        sys.exit(1)

    rows = read_rows(path)
    print(f"Importing {len(rows)} {args.kind} rows from {path}...")

    await db.init_database()
    async with db.AsyncSessionLocal() as session:
        counts = await IMPORTERS[args.kind](session, rows)

    print(f"  Imported: {counts['imported']}, skipped: {counts['skipped']}")
    await db.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
