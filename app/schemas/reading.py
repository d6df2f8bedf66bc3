"""Reading Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.enums import ReadingStatus


class ReadingApprove(BaseModel):
    """Schema for approving a reading with the admin-transcribed value."""

    corrected_reading: Decimal = Field(ge=0)


class ReadingReject(BaseModel):
    """Schema for rejecting a reading."""

    reason: str | None = None


class ReadingReopen(BaseModel):
    """Schema for returning an approved reading to the review queue."""

    reason: str | None = None


class ReadingResponse(BaseModel):
    """Schema for reading response."""

    id: int
    flat_id: int
    status: ReadingStatus
    year_month: str
    created_at: datetime
    has_image: bool
    tenant_reading: Decimal | None
    ocr_reading: Decimal | None
    corrected_reading: Decimal | None
    previous_reading: Decimal | None
    units_used: Decimal | None
    amount: Decimal | None
    approved_at: datetime | None
    tariff_at_approval: Decimal | None
    unit_factor_at_approval: Decimal | None
    minimum_price_at_approval: Decimal | None
    settings_version_at_approval: int | None
    rejection_reason: str | None
    reopen_reason: str | None
    reviewed_by_user_id: int | None

    model_config = {"from_attributes": True}


class ReadingList(BaseModel):
    """Schema for a filtered list of readings."""

    readings: list[ReadingResponse]
    total: int
