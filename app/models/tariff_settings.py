"""TariffSettings database model - versioned global billing configuration."""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class TariffSettings(Base):
    """One revision of the global tariff settings.

    Revisions are append-only. The row with the highest version is the
    configuration in effect; approvals record the version they used.
    """

    __tablename__ = "tariff_settings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    version: Mapped[int] = mapped_column(unique=True, index=True)
    tariff_per_unit: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=4))
    minimum_price: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    unit_factor: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=4))
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_by_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
