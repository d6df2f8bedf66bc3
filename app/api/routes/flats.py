"""Flat API routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import ensure_flat_access, get_current_user, require_admin
from app.core.database import get_db
from app.models.user import User
from app.schemas.flat import FlatCreate, FlatResponse, FlatUpdate
from app.schemas.reading import ReadingList, ReadingResponse
from app.services import flat as flat_service
from app.services import reading as reading_service

router = APIRouter(prefix="/flats", tags=["flats"])


@router.post(
    "/",
    response_model=FlatResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_flat(flat_data: FlatCreate, db: Session = Depends(get_db)):
    """Create a new flat."""
    return flat_service.create_flat(db, flat_data)


@router.get("/", response_model=list[FlatResponse])
def list_flats(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List flats. Tenants only see their own flat."""
    if not user.is_admin:
        return [user.flat] if user.flat else []
    return flat_service.get_flats(db, skip, limit)


@router.get("/{flat_id}", response_model=FlatResponse)
def get_flat(
    flat_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Get a flat by ID."""
    ensure_flat_access(user, flat_id)
    return flat_service.get_flat(db, flat_id)


@router.patch(
    "/{flat_id}",
    response_model=FlatResponse,
    dependencies=[Depends(require_admin)],
)
def update_flat(flat_id: int, flat_data: FlatUpdate, db: Session = Depends(get_db)):
    """Update a flat, e.g. its initial reading or tenant name."""
    return flat_service.update_flat(db, flat_id, flat_data)


@router.get("/{flat_id}/readings", response_model=ReadingList)
def list_flat_readings(
    flat_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingList:
    """Reading history of a flat, newest first."""
    ensure_flat_access(user, flat_id)
    readings = reading_service.list_readings_for_flat(db, flat_id)
    return ReadingList(
        readings=[ReadingResponse.model_validate(r) for r in readings],
        total=len(readings),
    )
