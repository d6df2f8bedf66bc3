"""
Whole-database export and import as JSON.

The dump holds one object per collection (users, flats, readings, settings),
each mapping row id to the row's columns. Importing overwrites rows with the
same id; there is no schema versioning or conflict resolution.
"""

import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from app.core.database import Base
from app.models.flat import Flat
from app.models.reading import Reading, year_month_of
from app.models.tariff_settings import TariffSettings
from app.models.user import User

logger = logging.getLogger(__name__)

# Import order satisfies foreign keys: users point at flats, settings and
# readings point at users
COLLECTIONS: dict[str, type[Base]] = {
    "flats": Flat,
    "users": User,
    "settings": TariffSettings,
    "readings": Reading,
}


def _to_json(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _from_json(column, value: Any) -> Any:
    if value is None:
        return None
    python_type = column.type.python_type
    if python_type is datetime:
        return datetime.fromisoformat(value)
    if python_type is Decimal:
        return Decimal(str(value))
    if issubclass(python_type, Enum):
        return python_type(value)
    return value


def export_collection(db: Session, model: type[Base]) -> dict[str, dict[str, Any]]:
    """Dump every row of a table keyed by its id."""
    columns = model.__table__.columns
    return {
        str(row.id): {c.key: _to_json(getattr(row, c.key)) for c in columns if c.key != "id"}
        for row in db.query(model).order_by(model.id).all()
    }


def export_data(db: Session) -> dict[str, dict[str, dict[str, Any]]]:
    """Dump all collections."""
    backup = {name: export_collection(db, model) for name, model in COLLECTIONS.items()}
    logger.info(
        "Exported %s",
        ", ".join(f"{name}={len(rows)}" for name, rows in backup.items()),
    )
    return backup


def import_collection(db: Session, model: type[Base], rows: dict[str, dict[str, Any]]) -> int:
    """Write rows into a table, replacing any row with the same id."""
    if not isinstance(rows, dict):
        raise ValueError(f"Collection '{model.__tablename__}' must be an object keyed by id")

    columns = {c.key: c for c in model.__table__.columns}
    count = 0
    for row_id, data in rows.items():
        if not isinstance(data, dict):
            raise ValueError(f"Row {row_id} of '{model.__tablename__}' must be an object")
        values = {
            key: _from_json(columns[key], value)
            for key, value in data.items()
            if key in columns and key != "id"
        }
        if model is Reading and not values.get("year_month") and values.get("created_at"):
            values["year_month"] = year_month_of(values["created_at"])
        db.merge(model(id=int(row_id), **values))
        count += 1
    db.flush()
    return count


def import_data(db: Session, backup: dict[str, Any]) -> dict[str, int]:
    """Load a dump produced by export_data in one transaction.

    Missing collections are skipped. Returns the number of rows written per
    collection.
    """
    if not isinstance(backup, dict):
        raise ValueError("Backup must be a JSON object")

    counts: dict[str, int] = {}
    try:
        for name, model in COLLECTIONS.items():
            if name in backup:
                counts[name] = import_collection(db, model, backup[name])
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Imported %s", ", ".join(f"{n}={c}" for n, c in counts.items()))
    return counts
