"""
PDF generation for bill receipts and monthly summaries.
Documents are built in memory and returned as bytes.
"""

import calendar
from datetime import datetime
from decimal import Decimal
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.core.config import settings
from app.models.flat import Flat
from app.models.reading import Reading
from app.schemas.summary import MonthlySummary
from app.schemas.tariff import BillBreakdown

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
ACCENT = colors.HexColor("#2c5aa0")


def format_number(value: Decimal | None) -> str:
    """Formats a quantity with up to three decimals, trailing zeros removed."""
    if value is None:
        return "-"
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def format_money(value: Decimal) -> str:
    """Formats amount for display."""
    return f"{settings.CURRENCY_LABEL} {value:,.2f}"


def format_month(year_month: str) -> str:
    """'2024-03' -> 'March 2024'."""
    year, month = year_month.split("-")
    return f"{calendar.month_name[int(month)]} {year}"


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReceiptTitle",
            parent=base["Heading2"],
            fontName=FONT_BOLD,
            textColor=ACCENT,
            alignment=TA_CENTER,
            spaceAfter=2 * mm,
        ),
        "subtitle": ParagraphStyle(
            "ReceiptSubtitle",
            parent=base["Normal"],
            fontName=FONT,
            textColor=colors.grey,
            alignment=TA_CENTER,
            spaceAfter=6 * mm,
        ),
        "heading": ParagraphStyle(
            "ReceiptHeading",
            parent=base["Heading4"],
            fontName=FONT_BOLD,
            textColor=ACCENT,
            spaceBefore=4 * mm,
            spaceAfter=2 * mm,
        ),
    }


def _build(story: list, title: str) -> bytes:
    buffer = BytesIO()
    generated_text = f"Generated: {datetime.now():%d.%m.%Y %H:%M}"

    def add_header(canvas, doc):
        canvas.saveState()
        canvas.setFont(FONT, 8)
        canvas.drawRightString(A4[0] - 15 * mm, A4[1] - 12 * mm, generated_text)
        canvas.drawRightString(A4[0] - 15 * mm, 10 * mm, f"Page {doc.page}")
        canvas.restoreState()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=20 * mm,
        bottomMargin=18 * mm,
        title=title,
        author=settings.PROJECT_NAME,
    )
    doc.build(story, onFirstPage=add_header, onLaterPages=add_header)
    return buffer.getvalue()


def _key_value_table(rows: list[list[str]]) -> Table:
    table = Table(rows, colWidths=[70 * mm, 105 * mm])
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), FONT),
                ("FONTNAME", (0, 0), (0, -1), FONT_BOLD),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ]
        )
    )
    return table


def build_receipt_pdf(reading: Reading, flat: Flat, bill: BillBreakdown) -> bytes:
    """Render the receipt of one approved reading."""
    styles = _styles()
    month = format_month(reading.year_month)

    story = [
        Paragraph("ELECTRICITY BILL RECEIPT", styles["title"]),
        Paragraph(month, styles["subtitle"]),
        _key_value_table(
            [
                ["Flat", flat.flat_number],
                ["Name", flat.tenant_name or flat.owner_name or "-"],
                ["Receipt no.", f"#{reading.id}"],
                [
                    "Approved on",
                    f"{reading.approved_at:%d.%m.%Y}" if reading.approved_at else "-",
                ],
            ]
        ),
        Paragraph("METER", styles["heading"]),
        _key_value_table(
            [
                ["Previous reading", format_number(reading.previous_reading)],
                ["Current reading", format_number(reading.meter_value)],
                ["Units used", format_number(bill.units_used)],
            ]
        ),
        Paragraph("CHARGES", styles["heading"]),
        _key_value_table(
            [
                ["Unit factor", format_number(bill.unit_factor)],
                ["Total quantity (kg)", format_number(bill.total_quantity)],
                ["Tariff per kg", format_money(bill.tariff_per_unit)],
                ["Energy amount", format_money(bill.energy_amount)],
                ["Minimum charge", format_money(bill.minimum_price)],
                ["Grand total", format_money(bill.amount)],
            ]
        ),
    ]
    return _build(story, title=f"Receipt {flat.flat_number} {reading.year_month}")


def build_summary_pdf(summary: MonthlySummary) -> bytes:
    """Render the monthly summary table; long tables continue on new pages."""
    styles = _styles()

    rows = [["S.No.", "Flat Number", "Name", "Meter Reading", "Bill Amount"]]
    for row in summary.rows:
        rows.append(
            [
                str(row.serial_number),
                row.flat_number,
                row.tenant_name or "-",
                format_number(row.meter_reading),
                format_money(row.bill_amount),
            ]
        )
    rows.append(["", "", "", "Total", format_money(summary.total_amount)])

    table = Table(
        rows,
        colWidths=[15 * mm, 30 * mm, 60 * mm, 32 * mm, 38 * mm],
        repeatRows=1,
    )
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), FONT),
                ("FONTNAME", (0, 0), (-1, 0), FONT_BOLD),
                ("FONTNAME", (0, -1), (-1, -1), FONT_BOLD),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e8eef7")),
                ("ALIGN", (3, 0), (-1, -1), "RIGHT"),
                ("LINEBELOW", (0, 0), (-1, -2), 0.25, colors.lightgrey),
                ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )

    story = [
        Paragraph("MONTHLY SUMMARY", styles["title"]),
        Paragraph(format_month(summary.year_month), styles["subtitle"]),
        table,
        Spacer(1, 4 * mm),
    ]
    return _build(story, title=f"Summary {summary.year_month}")
