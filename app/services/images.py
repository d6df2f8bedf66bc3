"""Storage for uploaded meter photos."""

import logging
import uuid
from pathlib import Path

from fastapi import HTTPException, status

from app.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/heic": ".heic",
}


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_meter_image(content: bytes, content_type: str | None) -> str:
    """Check an uploaded photo and return the file extension to store it with."""
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please choose a meter photo.",
        )
    extension = ALLOWED_CONTENT_TYPES.get((content_type or "").lower())
    if extension is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported image type '{content_type}'",
        )
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image is larger than {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB",
        )
    return extension


def save_meter_image(flat_id: int, content: bytes, content_type: str | None) -> str:
    """Store a meter photo and return its path relative to the upload directory."""
    extension = validate_meter_image(content, content_type)
    relative = Path(f"flat_{flat_id}") / f"{uuid.uuid4().hex}{extension}"
    target = upload_dir() / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    logger.debug("Stored meter photo %s (%d bytes)", relative, len(content))
    return relative.as_posix()


def resolve_image_path(image_path: str) -> Path:
    """Absolute path of a stored photo, refusing paths outside the upload directory."""
    base = upload_dir().resolve()
    target = (base / image_path).resolve()
    if base not in target.parents or not target.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )
    return target


def delete_meter_image(image_path: str) -> None:
    """Remove a stored photo if it exists."""
    target = upload_dir() / image_path
    target.unlink(missing_ok=True)
