"""Flat database model."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.reading import Reading
    from app.models.user import User


class Flat(Base):
    """A billable apartment unit."""

    __tablename__ = "flats"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    flat_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    tenant_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    owner_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tariff_override: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=4),
        nullable=True,
    )
    # Baseline for the first approval when no approved reading exists yet
    initial_reading: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=3),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    users: Mapped[list["User"]] = relationship(back_populates="flat")
    readings: Mapped[list["Reading"]] = relationship(back_populates="flat")

    @property
    def user_id(self) -> int | None:
        """ID of the tenant user linked to this flat, if any."""
        tenants = [u for u in self.users if u.is_active]
        return tenants[0].id if tenants else None
