import io

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas


@pytest.fixture()
def letter_pdf_bytes() -> bytes:
    """Generate a single-page letter request PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 760, "Request for certificate of enrollment")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_letter_pdf_bytes() -> bytes:
    """Generate a two-page letter PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(72, 760, "Page one of the letter")
    c.showPage()
    c.drawString(72, 760, "Page two of the letter")
    c.save()
    return buf.getvalue()
