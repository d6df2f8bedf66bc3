"""Reading database model - one meter submission per flat per month."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.enums import ReadingStatus

if TYPE_CHECKING:
    from app.models.flat import Flat
    from app.models.user import User


def year_month_of(moment: datetime) -> str:
    """Return the YYYY-MM bucket a timestamp falls into."""
    return f"{moment.year:04d}-{moment.month:02d}"


class Reading(Base):
    """Meter reading submitted by a tenant and reviewed by an admin."""

    __tablename__ = "readings"
    __table_args__ = (
        Index("ix_readings_flat_month", "flat_id", "year_month"),
        # At most one pending/approved reading per flat and month
        Index(
            "uq_readings_flat_month_active",
            "flat_id",
            "year_month",
            unique=True,
            sqlite_where=text("status != 'rejected'"),
            postgresql_where=text("status != 'rejected'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    flat_id: Mapped[int] = mapped_column(ForeignKey("flats.id"), index=True)

    # Submission
    image_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tenant_reading: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=3), nullable=True
    )
    ocr_reading: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=3), nullable=True
    )  # Legacy records only
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        index=True,
    )
    year_month: Mapped[str] = mapped_column(String(7), index=True)

    # Review
    status: Mapped[ReadingStatus] = mapped_column(
        Enum(ReadingStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=ReadingStatus.PENDING,
        index=True,
    )
    corrected_reading: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=3), nullable=True
    )
    previous_reading: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=3), nullable=True
    )
    units_used: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=3), nullable=True
    )
    amount: Mapped[Decimal | None] = mapped_column(Numeric(precision=12, scale=2), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reopen_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )

    # Settings frozen at approval time
    tariff_at_approval: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=4), nullable=True
    )
    unit_factor_at_approval: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=4), nullable=True
    )
    minimum_price_at_approval: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=2), nullable=True
    )
    settings_version_at_approval: Mapped[int | None] = mapped_column(nullable=True)

    # Relationships
    flat: Mapped["Flat"] = relationship(back_populates="readings")
    reviewed_by: Mapped["User | None"] = relationship()

    @property
    def bucket(self) -> str:
        """Month bucket, derived from created_at for legacy rows without one."""
        return self.year_month or year_month_of(self.created_at)

    @property
    def has_image(self) -> bool:
        return bool(self.image_path)

    @property
    def meter_value(self) -> Decimal | None:
        """Approved meter value, falling back to the legacy OCR value."""
        if self.corrected_reading is not None:
            return self.corrected_reading
        return self.ocr_reading
