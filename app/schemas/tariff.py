"""Tariff settings and bill schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class TariffSnapshot(BaseModel):
    """Immutable view of the global tariff settings at one version.

    Version 0 means nothing has been saved yet and the configured defaults
    are in effect.
    """

    version: int
    tariff_per_unit: Decimal
    minimum_price: Decimal
    unit_factor: Decimal
    created_at: datetime | None = None

    model_config = {"from_attributes": True, "frozen": True}


class TariffSettingsUpdate(BaseModel):
    """Schema for changing one or more tariff settings."""

    tariff_per_unit: Decimal | None = Field(default=None, ge=0)
    minimum_price: Decimal | None = Field(default=None, ge=0)
    unit_factor: Decimal | None = Field(default=None, gt=0)


class BillBreakdown(BaseModel):
    """Itemised bill for one reading."""

    units_used: Decimal
    unit_factor: Decimal
    total_quantity: Decimal
    tariff_per_unit: Decimal
    energy_amount: Decimal
    minimum_price: Decimal
    amount: Decimal
