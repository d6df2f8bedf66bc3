"""Tariff settings routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_user, require_admin
from app.core.database import get_db
from app.models.user import User
from app.schemas.tariff import TariffSettingsUpdate, TariffSnapshot
from app.services import tariff as tariff_service

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get(
    "/tariff",
    response_model=TariffSnapshot,
    dependencies=[Depends(get_current_user)],
)
def get_tariff(db: Session = Depends(get_db)) -> TariffSnapshot:
    """Get the tariff per unit, minimum price and unit factor in effect."""
    return tariff_service.get_current_settings(db)


@router.patch("/tariff", response_model=TariffSnapshot)
def update_tariff(
    data: TariffSettingsUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> TariffSnapshot:
    """Change tariff settings for future approvals.

    Already approved readings keep the values frozen at their approval.
    """
    return tariff_service.update_settings(db, data, user_id=admin.id)


@router.get(
    "/tariff/history",
    response_model=list[TariffSnapshot],
    dependencies=[Depends(require_admin)],
)
def get_tariff_history(db: Session = Depends(get_db)) -> list[TariffSnapshot]:
    """All saved tariff revisions, newest first."""
    return [
        TariffSnapshot.model_validate(r) for r in tariff_service.list_settings_history(db)
    ]
