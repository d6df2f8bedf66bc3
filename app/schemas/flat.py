"""Flat Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class FlatBase(BaseModel):
    """Base flat schema."""

    flat_number: str = Field(min_length=1, max_length=50)


class FlatCreate(FlatBase):
    """Schema for creating a new flat."""

    tenant_name: str | None = None
    owner_name: str | None = None
    tariff_override: Decimal | None = Field(default=None, ge=0)
    initial_reading: Decimal | None = Field(default=None, ge=0)


class FlatUpdate(BaseModel):
    """Schema for updating a flat."""

    flat_number: str | None = Field(default=None, min_length=1, max_length=50)
    tenant_name: str | None = None
    owner_name: str | None = None
    tariff_override: Decimal | None = Field(default=None, ge=0)
    initial_reading: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None


class FlatResponse(FlatBase):
    """Schema for flat response."""

    id: int
    tenant_name: str | None
    owner_name: str | None
    tariff_override: Decimal | None
    initial_reading: Decimal | None
    user_id: int | None
    created_at: datetime
    is_active: bool

    model_config = {"from_attributes": True}
