"""Monthly billing summary of approved readings."""

import re
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from app.models.enums import ReadingStatus
from app.models.reading import Reading, year_month_of
from app.schemas.summary import MonthlySummary, SummaryRow
from app.services.billing import display_amount

YEAR_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_year_month(year_month: str) -> str:
    """Check a YYYY-MM month string."""
    if not YEAR_MONTH_PATTERN.match(year_month):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid month '{year_month}', expected YYYY-MM",
        )
    return year_month


def summary_bucket(reading: Reading) -> str:
    """Month an approved reading is billed in."""
    if reading.year_month:
        return reading.year_month
    return year_month_of(reading.approved_at or reading.created_at)


def _approved_readings(db: Session) -> list[Reading]:
    return (
        db.query(Reading)
        .options(joinedload(Reading.flat))
        .filter(Reading.status == ReadingStatus.APPROVED)
        .all()
    )


def available_months(db: Session) -> list[str]:
    """Months with at least one approved reading, newest first."""
    return sorted({summary_bucket(r) for r in _approved_readings(db)}, reverse=True)


def monthly_summary(db: Session, year_month: str) -> MonthlySummary:
    """Approved bills of one month, one row per flat ordered by flat number."""
    validate_year_month(year_month)

    readings = [r for r in _approved_readings(db) if summary_bucket(r) == year_month]
    readings.sort(key=lambda r: r.flat.flat_number)

    rows = [
        SummaryRow(
            serial_number=index,
            reading_id=reading.id,
            flat_id=reading.flat_id,
            flat_number=reading.flat.flat_number,
            tenant_name=reading.flat.tenant_name or reading.flat.owner_name,
            meter_reading=reading.meter_value,
            bill_amount=display_amount(reading),
        )
        for index, reading in enumerate(readings, start=1)
    ]
    return MonthlySummary(
        year_month=year_month,
        rows=rows,
        total_amount=sum((row.bill_amount for row in rows), Decimal("0")),
    )
