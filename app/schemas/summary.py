"""Monthly summary schemas."""

from decimal import Decimal

from pydantic import BaseModel


class SummaryRow(BaseModel):
    """One flat's line in the monthly summary."""

    serial_number: int
    reading_id: int
    flat_id: int
    flat_number: str
    tenant_name: str | None
    meter_reading: Decimal | None
    bill_amount: Decimal


class MonthlySummary(BaseModel):
    """Approved bills for one calendar month."""

    year_month: str
    rows: list[SummaryRow]
    total_amount: Decimal


class AvailableMonths(BaseModel):
    """Months that have at least one approved reading, newest first."""

    months: list[str]
