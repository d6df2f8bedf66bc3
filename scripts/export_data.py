"""Export all users, flats, readings and settings to a JSON file.

Usage: python -m scripts.export_data [output.json]
"""

import argparse
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.backup import export_data


def main() -> int:
    default_name = f"flatmeter-backup-{datetime.now(UTC):%Y-%m-%d}.json"
    parser = argparse.ArgumentParser(description="Export the database to JSON")
    parser.add_argument("output", nargs="?", default=default_name, help="Output file")
    args = parser.parse_args()

    configure_logging()
    db = SessionLocal()
    try:
        backup = export_data(db)
    finally:
        db.close()

    output = Path(args.output)
    output.write_text(json.dumps(backup, indent=2), encoding="utf-8")

    print(f"Export complete! Saved to: {output}")
    for name, rows in backup.items():
        print(f"  {name}: {len(rows)} documents")
    return 0


if __name__ == "__main__":
    sys.exit(main())
