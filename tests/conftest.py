import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

REPORT_LINES = (
    "Rapporto di prova n. 2024/118",
    "Campione: Gelato al pistacchio",
    "Parametro             Risultato     U.M.",
    "Enterobatteriacee     < 10          UFC/g",
    "Listeria monocytogenes  Non rilevato  in 25 g",
)


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def report_pdf_bytes() -> bytes:
    """Generate a one-page laboratory report."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    y = 720
    for line in REPORT_LINES:
        c.drawString(72, y, line)
        y -= 18
    c.save()
    return buf.getvalue()


@pytest.fixture()
def garbled_text() -> str:
    """Letter-spaced text as produced by broken font encodings."""
    return " ".join(
        ["E n t e r o b a t t e r i a c e e", "< 1 0", "U F C / g"] * 4
        + ["S a l m o n e l l a", "A s s e n t e"] * 3
    )
