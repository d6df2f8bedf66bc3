"""Import a JSON backup produced by export_data, overwriting rows by id.

Usage: python -m scripts.import_data <backup.json>
"""

import argparse
import json
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from app.core.database import Base, SessionLocal, engine
from app.core.logging import configure_logging
from app.services.backup import import_data


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a JSON backup into the database")
    parser.add_argument("backup_file", help="Backup file created by scripts.export_data")
    args = parser.parse_args()

    configure_logging()
    path = Path(args.backup_file)
    if not path.is_file():
        print(f"Backup file not found: {path}", file=sys.stderr)
        return 1

    print(f"Reading backup from: {path}")
    try:
        backup = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"Backup is not valid JSON: {e}", file=sys.stderr)
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        counts = import_data(db, backup)
    except (ValueError, TypeError, SQLAlchemyError) as e:
        print(f"Import failed: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print("Import complete!")
    for name, count in counts.items():
        print(f"  {name}: {count} documents")
    return 0


if __name__ == "__main__":
    sys.exit(main())
