"""Reading routes: tenant uploads and the admin approval workflow."""

from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from app.api.dependencies import ensure_flat_access, get_current_user, require_admin
from app.core.database import get_db
from app.models.enums import ReadingStatus
from app.models.reading import Reading
from app.models.user import User
from app.schemas.reading import (
    ReadingApprove,
    ReadingList,
    ReadingReject,
    ReadingReopen,
    ReadingResponse,
)
from app.schemas.tariff import BillBreakdown
from app.services import reading as reading_service
from app.services.billing import bill_for_reading
from app.services.images import resolve_image_path
from app.services.receipts import build_receipt_pdf
from app.services.tariff import get_current_settings

router = APIRouter(prefix="/readings", tags=["readings"])


def _get_visible_reading(db: Session, reading_id: int, user: User) -> Reading:
    reading = reading_service.get_reading(db, reading_id)
    ensure_flat_access(user, reading.flat_id)
    return reading


def _require_approved(reading: Reading) -> None:
    if reading.status != ReadingStatus.APPROVED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Bill is only available for approved readings",
        )


@router.post("/", response_model=ReadingResponse, status_code=status.HTTP_201_CREATED)
def submit_reading(
    image: UploadFile = File(..., description="Photo of the meter"),
    tenant_reading: Decimal | None = Form(None, ge=0),
    flat_id: int | None = Form(None, description="Required for admins uploading for a flat"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingResponse:
    """Upload this month's meter photo. One pending/approved upload per flat per month."""
    if user.is_admin:
        if flat_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="flat_id is required",
            )
    else:
        if user.flat_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Your account is not linked to a flat",
            )
        flat_id = flat_id or user.flat_id
        ensure_flat_access(user, flat_id)

    content = image.file.read()
    reading = reading_service.submit_reading(
        db, flat_id, content, image.content_type, tenant_reading=tenant_reading
    )
    return ReadingResponse.model_validate(reading)


@router.get("/", response_model=ReadingList)
def list_readings(
    status_filter: ReadingStatus | None = Query(None, alias="status"),
    flat_id: int | None = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingList:
    """List readings, newest first. Tenants only see their own flat."""
    if not user.is_admin:
        if user.flat_id is None:
            return ReadingList(readings=[], total=0)
        if flat_id is not None:
            ensure_flat_access(user, flat_id)
        flat_id = user.flat_id

    readings = reading_service.list_readings(db, status_filter, flat_id)
    return ReadingList(
        readings=[ReadingResponse.model_validate(r) for r in readings],
        total=len(readings),
    )


@router.get("/{reading_id}", response_model=ReadingResponse)
def get_reading(
    reading_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingResponse:
    """Get a reading by ID."""
    return ReadingResponse.model_validate(_get_visible_reading(db, reading_id, user))


@router.get("/{reading_id}/image", response_class=FileResponse)
def get_reading_image(
    reading_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> FileResponse:
    """Download the meter photo of a reading."""
    reading = _get_visible_reading(db, reading_id, user)
    if not reading.image_path:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
    return FileResponse(resolve_image_path(reading.image_path))


@router.get("/{reading_id}/bill", response_model=BillBreakdown)
def get_reading_bill(
    reading_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> BillBreakdown:
    """Itemised bill of an approved reading."""
    reading = _get_visible_reading(db, reading_id, user)
    _require_approved(reading)
    return bill_for_reading(reading)


@router.get("/{reading_id}/receipt.pdf", response_class=Response)
def download_receipt(
    reading_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Response:
    """Download the PDF receipt of an approved reading."""
    reading = _get_visible_reading(db, reading_id, user)
    _require_approved(reading)

    pdf = build_receipt_pdf(reading, reading.flat, bill_for_reading(reading))
    filename = f"receipt-{reading.flat.flat_number}-{reading.year_month}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{reading_id}/approve", response_model=ReadingResponse)
def approve_reading(
    reading_id: int,
    data: ReadingApprove,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ReadingResponse:
    """Approve a pending reading with the transcribed meter value and compute its bill."""
    tariff = get_current_settings(db)
    reading = reading_service.approve_reading(
        db, reading_id, data.corrected_reading, tariff, reviewer_id=admin.id
    )
    return ReadingResponse.model_validate(reading)


@router.post("/{reading_id}/reject", response_model=ReadingResponse)
def reject_reading(
    reading_id: int,
    data: ReadingReject,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ReadingResponse:
    """Reject a pending reading, e.g. for an unreadable photo."""
    reading = reading_service.reject_reading(db, reading_id, data.reason, reviewer_id=admin.id)
    return ReadingResponse.model_validate(reading)


@router.post("/{reading_id}/reopen", response_model=ReadingResponse)
def reopen_reading(
    reading_id: int,
    data: ReadingReopen,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ReadingResponse:
    """Send an approved reading back to the review queue, clearing its bill."""
    reading = reading_service.reopen_reading(db, reading_id, data.reason, reviewer_id=admin.id)
    return ReadingResponse.model_validate(reading)
