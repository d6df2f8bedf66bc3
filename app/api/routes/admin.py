"""Admin routes for exporting and importing the whole database."""

import json
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.dependencies import require_admin
from app.core.database import get_db
from app.services.backup import export_data, import_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/backup")
def download_backup(db: Session = Depends(get_db)) -> JSONResponse:
    """Download all users, flats, readings and settings as JSON."""
    filename = f"flatmeter-backup-{datetime.now(UTC):%Y-%m-%d}.json"
    return JSONResponse(
        content=export_data(db),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/restore")
def restore_backup(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
) -> dict[str, dict[str, int]]:
    """Import a backup, overwriting rows that have the same id."""
    try:
        backup = json.loads(file.file.read())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Backup is not valid JSON: {e}",
        ) from e

    try:
        counts = import_data(db, backup)
    except (ValueError, TypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid backup: {e}",
        ) from e
    except SQLAlchemyError as e:
        logger.exception("Backup import failed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Backup could not be imported",
        ) from e
    return {"imported": counts}
