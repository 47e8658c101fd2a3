"""
PDF generation utilities using ReportLab.
"""

import io
from datetime import datetime
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

BRAND_COLOR = colors.HexColor("#1d4ed8")
MUTED_COLOR = colors.HexColor("#64748b")
GRID_COLOR = colors.HexColor("#e2e8f0")

HEADER_TABLE_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, 0), 9),
    ("FONTSIZE", (0, 1), (-1, -1), 8),
    ("GRID", (0, 0), (-1, -1), 0.5, GRID_COLOR),
    ("PADDING", (0, 0), (-1, -1), 5),
    ("VALIGN", (0, 0), (-1, -1), "TOP"),
]


def _money(value: Optional[float]) -> str:
    return f"${(value or 0):,.2f}"


def _document(buffer: io.BytesIO, pagesize=LETTER) -> SimpleDocTemplate:
    return SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        rightMargin=0.6 * inch,
        leftMargin=0.6 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
    )


def _styles():
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "PdsTitle",
        parent=styles["Heading1"],
        fontSize=20,
        textColor=BRAND_COLOR,
        spaceAfter=12,
    )
    footer_style = ParagraphStyle(
        "PdsFooter",
        parent=styles["Normal"],
        fontSize=8,
        textColor=MUTED_COLOR,
        alignment=1,  # Center
    )
    return styles, title_style, footer_style


def generate_paystub_pdf(
    employee_name: str,
    employee_email: str,
    event_name: str,
    event_date: str,
    venue: str,
    state: str,
    payment: dict,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Generate a single-event paystub.

    ``payment`` uses the keys produced by the payroll calculator
    (actualHours, regRate, extAmtOnRegRate, commissionAmt, ...).
    """
    buffer = io.BytesIO()
    doc = _document(buffer)
    styles, title_style, footer_style = _styles()
    elements = []

    generated = (generated_at or datetime.now()).strftime("%B %d, %Y")
    elements.append(Paragraph("PDS Staffing", title_style))
    elements.append(Paragraph("Event Paystub", styles["Heading2"]))
    elements.append(Spacer(1, 12))

    info_data = [
        ["Employee:", employee_name],
        ["Email:", employee_email],
        ["Event:", event_name],
        ["Date:", event_date],
        ["Venue:", f"{venue} ({state})" if state else venue],
    ]
    info_table = Table(info_data, colWidths=[1.4 * inch, 4.5 * inch])
    info_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("TEXTCOLOR", (0, 0), (0, -1), MUTED_COLOR),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements.append(info_table)
    elements.append(Spacer(1, 16))

    earnings = [
        ["Item", "Amount"],
        ["Hours worked", f"{payment.get('actualHours', 0):.2f}"],
        ["Regular rate", _money(payment.get("regRate"))],
        ["Loaded rate", _money(payment.get("loadedRate"))],
        ["Extended amount", _money(payment.get("extAmtOnRegRate"))],
        ["Commission", _money(payment.get("commissionAmt"))],
        ["Total (with commission)", _money(payment.get("totalFinalCommissionAmt"))],
        ["Tips", _money(payment.get("tips"))],
        ["Rest break", _money(payment.get("restBreak"))],
        ["Adjustment", _money(payment.get("adjustmentAmount"))],
        ["Final pay", _money(payment.get("finalPay"))],
    ]
    earnings_table = Table(earnings, colWidths=[3.5 * inch, 2 * inch])
    earnings_table.setStyle(
        TableStyle(
            HEADER_TABLE_STYLE
            + [
                ("FONTSIZE", (0, 1), (-1, -1), 10),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ]
        )
    )
    elements.append(earnings_table)
    elements.append(Spacer(1, 24))
    elements.append(Paragraph(f"Generated by PDS Staffing • {generated}", footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer.getvalue()


def generate_background_checks_pdf(
    rows: List[dict], generated_at: Optional[datetime] = None
) -> bytes:
    """Roster of vendors with their background check and I-9 status."""
    buffer = io.BytesIO()
    doc = _document(buffer, pagesize=landscape(LETTER))
    styles, title_style, footer_style = _styles()
    elements = []

    generated = (generated_at or datetime.now()).strftime("%B %d, %Y")
    elements.append(Paragraph("Background Check Status", title_style))
    elements.append(Spacer(1, 8))

    if rows:
        data = [["Name", "Email", "State", "Status", "I-9 Documents", "Notes"]]
        for row in rows:
            notes = row.get("notes") or "-"
            if len(notes) > 50:
                notes = notes[:47] + "..."
            data.append(
                [
                    row.get("full_name") or "-",
                    row.get("email") or "-",
                    row.get("state") or "-",
                    (row.get("status") or "pending").replace("_", " ").title(),
                    "Yes" if row.get("has_i9_documents") else "No",
                    notes,
                ]
            )
        table = Table(
            data,
            colWidths=[1.8 * inch, 2.4 * inch, 0.6 * inch, 1.1 * inch, 1.0 * inch, 2.8 * inch],
            repeatRows=1,
        )
        table.setStyle(TableStyle(HEADER_TABLE_STYLE))
        elements.append(table)
    else:
        elements.append(Paragraph("No vendors found.", styles["Normal"]))

    elements.append(Spacer(1, 20))
    elements.append(Paragraph(f"Generated by PDS Staffing • {generated}", footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer.getvalue()


def generate_payments_report_pdf(
    venues: List[dict], generated_at: Optional[datetime] = None
) -> bytes:
    """Venue → event → employee payment report."""
    buffer = io.BytesIO()
    doc = _document(buffer, pagesize=landscape(LETTER))
    styles, title_style, footer_style = _styles()
    elements = []

    generated = (generated_at or datetime.now()).strftime("%B %d, %Y")
    elements.append(Paragraph("Payments by Venue", title_style))

    if not venues:
        elements.append(Paragraph("No payment data for this period.", styles["Normal"]))

    for venue in venues:
        location = ", ".join(part for part in (venue.get("city"), venue.get("state")) if part)
        elements.append(
            Paragraph(
                f"{venue['venue']} ({location}) • {_money(venue.get('totalPayment'))} • "
                f"{venue.get('totalHours', 0):.2f} hrs",
                styles["Heading2"],
            )
        )
        for event in venue.get("events", []):
            elements.append(
                Paragraph(
                    f"{event['name']} on {event['date']}: {_money(event.get('eventTotal'))}",
                    styles["Heading4"],
                )
            )
            data = [["Employee", "Hours", "Rate", "Commission", "Tips", "Rest", "Adj.", "Final"]]
            for p in event.get("payments", []):
                data.append(
                    [
                        f"{p.get('firstName', '')} {p.get('lastName', '')}".strip() or "-",
                        f"{p.get('actualHours', 0):.2f}",
                        _money(p.get("regRate")),
                        _money(p.get("commissionAmt")),
                        _money(p.get("tips")),
                        _money(p.get("restBreak")),
                        _money(p.get("adjustmentAmount")),
                        _money(p.get("finalPay")),
                    ]
                )
            table = Table(data, repeatRows=1)
            table.setStyle(TableStyle(HEADER_TABLE_STYLE))
            elements.append(table)
            elements.append(Spacer(1, 10))

    elements.append(Spacer(1, 16))
    elements.append(Paragraph(f"Generated by PDS Staffing • {generated}", footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer.getvalue()
