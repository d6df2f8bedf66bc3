"""Reading service - monthly submissions and the approval workflow."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.enums import ReadingStatus
from app.models.flat import Flat
from app.models.reading import Reading, year_month_of
from app.schemas.tariff import TariffSnapshot
from app.services.billing import compute_bill, compute_units_used, quantize_quantity
from app.services.flat import get_flat
from app.services.images import delete_meter_image, save_meter_image

logger = logging.getLogger(__name__)

UPLOAD_LIMIT_MESSAGE = (
    "Upload limit reached for this calendar month (pending/approved reading exists)."
)


def get_reading(db: Session, reading_id: int) -> Reading:
    """Get a reading by ID."""
    reading = db.query(Reading).filter(Reading.id == reading_id).first()
    if not reading:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Reading not found",
        )
    return reading


def list_readings(
    db: Session,
    status_filter: ReadingStatus | None = None,
    flat_id: int | None = None,
) -> list[Reading]:
    """List readings newest first.

    Approved readings are ordered by approval time (falling back to creation
    time); everything else by creation time.
    """
    query = db.query(Reading)
    if status_filter is not None:
        query = query.filter(Reading.status == status_filter)
    if flat_id is not None:
        query = query.filter(Reading.flat_id == flat_id)

    if status_filter == ReadingStatus.APPROVED:
        order = func.coalesce(Reading.approved_at, Reading.created_at).desc()
    else:
        order = Reading.created_at.desc()
    return query.order_by(order, Reading.id.desc()).all()


def list_readings_for_flat(db: Session, flat_id: int) -> list[Reading]:
    """Reading history of one flat, newest submission first."""
    get_flat(db, flat_id)
    return (
        db.query(Reading)
        .filter(Reading.flat_id == flat_id)
        .order_by(Reading.created_at.desc(), Reading.id.desc())
        .all()
    )


def check_monthly_limit(db: Session, flat_id: int, year_month: str) -> None:
    """Refuse a second pending/approved reading for the same flat and month."""
    conflicts = (
        db.query(Reading)
        .filter(
            Reading.flat_id == flat_id,
            Reading.year_month == year_month,
            Reading.status != ReadingStatus.REJECTED,
        )
        .order_by(Reading.created_at.desc())
        .all()
    )
    if not conflicts:
        return

    latest = conflicts[0]
    logger.warning("Flat %s already has reading %s for %s", flat_id, latest.id, year_month)
    if latest.created_at:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                "Upload limit reached. You already have a pending/approved upload on "
                f"{latest.created_at:%Y-%m-%d}. Try again next month."
            ),
        )
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=UPLOAD_LIMIT_MESSAGE)


def submit_reading(
    db: Session,
    flat_id: int,
    image: bytes,
    content_type: str | None,
    tenant_reading: Decimal | None = None,
    now: datetime | None = None,
) -> Reading:
    """Record a tenant's meter photo as a pending reading for the current month."""
    get_flat(db, flat_id)

    now = now or datetime.now(UTC)
    year_month = year_month_of(now)
    check_monthly_limit(db, flat_id, year_month)

    image_path = save_meter_image(flat_id, image, content_type)
    reading = Reading(
        flat_id=flat_id,
        image_path=image_path,
        tenant_reading=tenant_reading,
        status=ReadingStatus.PENDING,
        created_at=now,
        year_month=year_month,
    )
    db.add(reading)
    try:
        db.commit()
    except IntegrityError:
        # Another submission for this month won the race
        db.rollback()
        delete_meter_image(image_path)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=UPLOAD_LIMIT_MESSAGE,
        ) from None
    db.refresh(reading)

    logger.info("Reading %s submitted for flat %s (%s)", reading.id, flat_id, year_month)
    return reading


def find_previous_reading(db: Session, flat: Flat, exclude_reading_id: int) -> Decimal:
    """Baseline for the next bill of a flat.

    The value of the most recently approved reading, else the flat's initial
    reading, else 0.
    """
    previous = (
        db.query(Reading)
        .filter(
            Reading.flat_id == flat.id,
            Reading.status == ReadingStatus.APPROVED,
            Reading.id != exclude_reading_id,
        )
        .order_by(func.coalesce(Reading.approved_at, Reading.created_at).desc(), Reading.id.desc())
        .first()
    )
    if previous is not None and previous.meter_value is not None:
        return previous.meter_value
    if flat.initial_reading is not None:
        return flat.initial_reading
    return Decimal("0")


def _require_status(reading: Reading, expected: ReadingStatus, action: str) -> None:
    if reading.status != expected:
        logger.warning(
            "Refused to %s reading %s in status %s", action, reading.id, reading.status.value
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot {action} a reading with status '{reading.status.value}'",
        )


def approve_reading(
    db: Session,
    reading_id: int,
    corrected_reading: Decimal,
    tariff: TariffSnapshot,
    reviewer_id: int | None = None,
    now: datetime | None = None,
) -> Reading:
    """Approve a pending reading and freeze its bill.

    The flat row is locked for the duration so concurrent approvals for the
    same flat compute their previous reading one after the other.
    """
    flat_id = get_reading(db, reading_id).flat_id
    flat = db.query(Flat).filter(Flat.id == flat_id).with_for_update().one()

    # Re-read under the lock; another approval may have committed meanwhile
    reading = (
        db.query(Reading)
        .filter(Reading.id == reading_id)
        .with_for_update()
        .populate_existing()
        .one()
    )
    _require_status(reading, ReadingStatus.PENDING, "approve")

    corrected = quantize_quantity(corrected_reading)
    previous = find_previous_reading(db, flat, exclude_reading_id=reading.id)
    units_used = compute_units_used(corrected, previous)
    bill = compute_bill(units_used, tariff.tariff_per_unit, tariff.unit_factor, tariff.minimum_price)

    reading.corrected_reading = corrected
    reading.previous_reading = previous
    reading.units_used = bill.units_used
    reading.amount = bill.amount
    reading.status = ReadingStatus.APPROVED
    reading.approved_at = now or datetime.now(UTC)
    reading.tariff_at_approval = tariff.tariff_per_unit
    reading.unit_factor_at_approval = tariff.unit_factor
    reading.minimum_price_at_approval = tariff.minimum_price
    reading.settings_version_at_approval = tariff.version
    reading.rejection_reason = None
    reading.reviewed_by_user_id = reviewer_id
    db.commit()
    db.refresh(reading)

    logger.info(
        "Approved reading %s for flat %s: %s - %s = %s units, amount %s (settings v%d)",
        reading.id,
        flat.flat_number,
        corrected,
        previous,
        bill.units_used,
        bill.amount,
        tariff.version,
    )
    return reading


def reject_reading(
    db: Session,
    reading_id: int,
    reason: str | None = None,
    reviewer_id: int | None = None,
) -> Reading:
    """Reject a pending reading; the tenant may then upload again this month."""
    reading = get_reading(db, reading_id)
    _require_status(reading, ReadingStatus.PENDING, "reject")

    reading.status = ReadingStatus.REJECTED
    reading.rejection_reason = (reason or "").strip() or None
    reading.reviewed_by_user_id = reviewer_id
    db.commit()
    db.refresh(reading)

    logger.info("Rejected reading %s: %s", reading.id, reading.rejection_reason or "no reason")
    return reading


def reopen_reading(
    db: Session,
    reading_id: int,
    reason: str | None = None,
    reviewer_id: int | None = None,
) -> Reading:
    """Return an approved reading to the review queue.

    The computed bill and frozen settings are cleared; the photo, tenant
    value, submission time and month are kept.
    """
    reading = get_reading(db, reading_id)
    _require_status(reading, ReadingStatus.APPROVED, "reopen")

    reading.status = ReadingStatus.PENDING
    reading.previous_reading = None
    reading.units_used = None
    reading.amount = None
    reading.approved_at = None
    reading.tariff_at_approval = None
    reading.unit_factor_at_approval = None
    reading.minimum_price_at_approval = None
    reading.settings_version_at_approval = None
    reading.rejection_reason = None
    reading.reopen_reason = (reason or "").strip() or None
    reading.reviewed_by_user_id = reviewer_id
    db.commit()
    db.refresh(reading)

    logger.info("Reopened reading %s: %s", reading.id, reading.reopen_reason or "no reason")
    return reading
