"""
Clearance Certificate

Renders the clearance certificate PDF for a completed application.
"""

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfgen import canvas

from app.core.config import settings


@dataclass(frozen=True)
class CertificateSnapshot:
    """What the certificate shows about a completed clearance."""

    student_name: str
    student_number: str | None
    department: str | None
    year_level: int | None
    completed_at: datetime


def ordinal(number: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th'."""
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def render_certificate(snapshot: CertificateSnapshot) -> bytes:
    """
    Draw the certificate for ``snapshot``.

    Returns:
        The PDF document as bytes
    """
    buffer = BytesIO()
    width, height = landscape(A4)
    p = canvas.Canvas(buffer, pagesize=(width, height))
    p.setTitle("Student Clearance Certificate")

    # Border
    p.setLineWidth(3)
    p.rect(30, 30, width - 60, height - 60)

    p.setFont("Helvetica-Bold", 22)
    p.drawCentredString(width / 2, height - 100, settings.university_name.upper())
    p.setFont("Helvetica-Bold", 18)
    p.drawCentredString(width / 2, height - 140, "STUDENT CLEARANCE CERTIFICATE")

    year_level = f"{ordinal(snapshot.year_level)} Year" if snapshot.year_level else "N/A"

    p.setFont("Helvetica", 13)
    p.drawString(120, height - 210, f"Name: {snapshot.student_name}")
    p.drawString(120, height - 235, f"Student ID: {snapshot.student_number or 'N/A'}")
    p.drawString(120, height - 260, f"Department: {snapshot.department or 'N/A'}")
    p.drawString(120, height - 285, f"Year Level: {year_level}")

    p.setFont("Helvetica-Oblique", 12)
    p.drawCentredString(
        width / 2,
        height - 340,
        "Has successfully completed all clearance requirements "
        "and is cleared from all university obligations.",
    )

    p.setFont("Helvetica", 12)
    p.drawString(120, 110, f"Date: {snapshot.completed_at.strftime('%B %d, %Y')}")
    p.line(width - 320, 120, width - 120, 120)
    p.drawCentredString(width - 220, 100, "Registrar Office")
    p.setFont("Helvetica-Oblique", 10)
    p.drawCentredString(width - 220, 85, "Authorized Signature")

    p.showPage()
    p.save()
    buffer.seek(0)
    return buffer.getvalue()
