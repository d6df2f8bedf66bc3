"""Billing formula shared by approval, receipts and summaries.

A bill is a linear function of the consumed units:

    total_quantity = units_used * unit_factor
    energy_amount  = total_quantity * tariff_per_unit
    amount         = energy_amount + minimum_price

The minimum price is a standing charge that is always added; it is not a
floor applied to the energy amount.
"""

from decimal import ROUND_HALF_UP, Decimal

from app.core.config import settings
from app.models.enums import ReadingStatus
from app.models.reading import Reading
from app.schemas.tariff import BillBreakdown

MONEY = Decimal("0.01")
QUANTITY = Decimal("0.001")


def quantize_money(value: Decimal) -> Decimal:
    """Round a currency amount half-up to two decimal places."""
    return value.quantize(MONEY, rounding=ROUND_HALF_UP)


def quantize_quantity(value: Decimal) -> Decimal:
    """Round a meter quantity half-up to three decimal places."""
    return value.quantize(QUANTITY, rounding=ROUND_HALF_UP)


def compute_units_used(corrected_reading: Decimal, previous_reading: Decimal) -> Decimal:
    """Units consumed since the previous reading, clamped to 0 on meter resets."""
    return max(Decimal("0"), corrected_reading - previous_reading)


def compute_bill(
    units_used: Decimal,
    tariff_per_unit: Decimal,
    unit_factor: Decimal,
    minimum_price: Decimal,
) -> BillBreakdown:
    """Compute the itemised bill for a number of consumed meter units."""
    total_quantity = units_used * unit_factor
    energy_amount = total_quantity * tariff_per_unit
    return BillBreakdown(
        units_used=quantize_quantity(units_used),
        unit_factor=unit_factor,
        total_quantity=quantize_quantity(total_quantity),
        tariff_per_unit=tariff_per_unit,
        energy_amount=quantize_money(energy_amount),
        minimum_price=quantize_money(minimum_price),
        amount=quantize_money(energy_amount + minimum_price),
    )


def bill_for_reading(reading: Reading) -> BillBreakdown:
    """Recompute the bill of an approved reading from its frozen settings.

    Readings approved before settings were frozen fall back to the configured
    legacy constants, and to ``max(value - previous, 0)`` when no unit count
    was stored.
    """
    units = reading.units_used
    if units is None:
        current = reading.meter_value or Decimal("0")
        units = compute_units_used(current, reading.previous_reading or Decimal("0"))

    tariff = reading.tariff_at_approval
    if tariff is None:
        tariff = settings.LEGACY_TARIFF_PER_UNIT
    unit_factor = reading.unit_factor_at_approval
    if unit_factor is None:
        unit_factor = settings.DEFAULT_UNIT_FACTOR
    minimum_price = reading.minimum_price_at_approval
    if minimum_price is None:
        minimum_price = settings.DEFAULT_MINIMUM_PRICE

    return compute_bill(units, tariff, unit_factor, minimum_price)


def display_amount(reading: Reading) -> Decimal:
    """Amount to show for a reading in any status."""
    if reading.status == ReadingStatus.APPROVED:
        return bill_for_reading(reading).amount
    return reading.amount if reading.amount is not None else Decimal("0")
