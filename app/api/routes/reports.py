"""Monthly summary report routes (admin only)."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.dependencies import require_admin
from app.core.database import get_db
from app.schemas.summary import AvailableMonths, MonthlySummary
from app.services import summary as summary_service
from app.services.receipts import build_summary_pdf

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(require_admin)])


@router.get("/months", response_model=AvailableMonths)
def list_months(db: Session = Depends(get_db)) -> AvailableMonths:
    """Months that have approved readings, newest first."""
    return AvailableMonths(months=summary_service.available_months(db))


# Declared before the JSON route so "2024-03.pdf" is not taken as a month
@router.get("/summary/{year_month}.pdf", response_class=Response)
def download_summary(year_month: str, db: Session = Depends(get_db)) -> Response:
    """Download the monthly summary as a PDF."""
    summary = summary_service.monthly_summary(db, year_month)
    return Response(
        content=build_summary_pdf(summary),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="summary-{year_month}.pdf"'},
    )


@router.get("/summary/{year_month}", response_model=MonthlySummary)
def get_summary(year_month: str, db: Session = Depends(get_db)) -> MonthlySummary:
    """Bill amount of every approved reading in a month, with the total."""
    return summary_service.monthly_summary(db, year_month)
