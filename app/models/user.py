"""User database model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.enums import UserRole

if TYPE_CHECKING:
    from app.models.flat import Flat


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=UserRole.TENANT,
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    is_active: Mapped[bool] = mapped_column(default=True)

    # Tenants are linked to the flat they pay for
    flat_id: Mapped[int | None] = mapped_column(
        ForeignKey("flats.id"),
        nullable=True,
        index=True,
    )

    # Relationships
    flat: Mapped["Flat | None"] = relationship(back_populates="users")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
