"""Flat service for business logic."""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.flat import Flat
from app.schemas.flat import FlatCreate, FlatUpdate


def _ensure_unique_number(db: Session, flat_number: str, exclude_id: int | None = None) -> None:
    query = db.query(Flat).filter(Flat.flat_number == flat_number)
    if exclude_id is not None:
        query = query.filter(Flat.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Flat '{flat_number}' already exists",
        )


def create_flat(db: Session, flat_data: FlatCreate) -> Flat:
    """Create a new flat."""
    flat_number = flat_data.flat_number.strip()
    _ensure_unique_number(db, flat_number)

    db_flat = Flat(
        flat_number=flat_number,
        tenant_name=flat_data.tenant_name,
        owner_name=flat_data.owner_name,
        tariff_override=flat_data.tariff_override,
        initial_reading=flat_data.initial_reading,
    )
    db.add(db_flat)
    db.commit()
    db.refresh(db_flat)
    return db_flat


def get_flat(db: Session, flat_id: int) -> Flat:
    """Get a flat by ID."""
    db_flat = db.query(Flat).filter(Flat.id == flat_id).first()
    if not db_flat:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Flat not found",
        )
    return db_flat


def get_flats(db: Session, skip: int = 0, limit: int = 100) -> list[Flat]:
    """Get all flats ordered by flat number, with pagination."""
    return db.query(Flat).order_by(Flat.flat_number).offset(skip).limit(limit).all()


def update_flat(db: Session, flat_id: int, flat_data: FlatUpdate) -> Flat:
    """Update a flat."""
    db_flat = get_flat(db, flat_id)

    update_data = flat_data.model_dump(exclude_unset=True)
    # Required columns cannot be cleared
    for field in ("flat_number", "is_active"):
        if update_data.get(field, False) is None:
            del update_data[field]

    if "flat_number" in update_data:
        update_data["flat_number"] = update_data["flat_number"].strip()
        _ensure_unique_number(db, update_data["flat_number"], exclude_id=flat_id)

    for field, value in update_data.items():
        setattr(db_flat, field, value)

    db.commit()
    db.refresh(db_flat)
    return db_flat
