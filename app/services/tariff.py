"""Tariff settings service - versioned global billing configuration."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.tariff_settings import TariffSettings
from app.schemas.tariff import TariffSettingsUpdate, TariffSnapshot

logger = logging.getLogger(__name__)


def default_snapshot() -> TariffSnapshot:
    """Settings in effect before an admin has saved any."""
    return TariffSnapshot(
        version=0,
        tariff_per_unit=settings.DEFAULT_TARIFF_PER_UNIT,
        minimum_price=settings.DEFAULT_MINIMUM_PRICE,
        unit_factor=settings.DEFAULT_UNIT_FACTOR,
    )


def _latest_revision(db: Session) -> TariffSettings | None:
    return db.query(TariffSettings).order_by(TariffSettings.version.desc()).first()


def get_current_settings(db: Session) -> TariffSnapshot:
    """Get the tariff settings currently in effect."""
    revision = _latest_revision(db)
    if revision is None:
        return default_snapshot()
    return TariffSnapshot.model_validate(revision)


def update_settings(
    db: Session,
    data: TariffSettingsUpdate,
    user_id: int | None = None,
) -> TariffSnapshot:
    """Save a new settings revision with the given fields changed.

    Fields left unset keep their current value. Approved readings are not
    touched; they carry the values frozen when they were approved.
    """
    changes = data.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No settings to update",
        )

    current = get_current_settings(db)
    revision = TariffSettings(
        version=current.version + 1,
        tariff_per_unit=changes.get("tariff_per_unit", current.tariff_per_unit),
        minimum_price=changes.get("minimum_price", current.minimum_price),
        unit_factor=changes.get("unit_factor", current.unit_factor),
        updated_by_user_id=user_id,
    )
    db.add(revision)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tariff settings were changed by someone else, reload and try again",
        ) from None
    db.refresh(revision)

    logger.info(
        "Tariff settings v%d: tariff=%s minimum=%s unit_factor=%s",
        revision.version,
        revision.tariff_per_unit,
        revision.minimum_price,
        revision.unit_factor,
    )
    return TariffSnapshot.model_validate(revision)


def list_settings_history(db: Session) -> list[TariffSettings]:
    """All saved settings revisions, newest first."""
    return db.query(TariffSettings).order_by(TariffSettings.version.desc()).all()
