import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

W9_TEXT = (
    "Form W-9 Request for Taxpayer Identification Number and Certification\n"
    "Name (as shown on your income tax return)\n"
    "John Smith\n"
    "Business name/disregarded entity name, if different from above\n"
    "Smith Hauling LLC\n"
    "Address (number, street, and apt. or suite no.)\n"
    "123 Main Street\n"
    "City, state, and ZIP code\n"
    "Austin, TX 78701\n"
    "Employer identification number\n"
    "12-3456789\n"
)


def _pdf_with_lines(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def w9_text() -> str:
    return W9_TEXT


@pytest.fixture()
def w9_pdf_bytes() -> bytes:
    """A single-page PDF carrying the sample W-9 lines."""
    return _pdf_with_lines([W9_TEXT.splitlines()])


@pytest.fixture()
def contract_pdf_bytes() -> bytes:
    """A two-page contract PDF."""
    return _pdf_with_lines(
        [
            ["Service Agreement", "The contractor agrees to the terms below."],
            ["Payment is due within thirty days."],
        ]
    )
