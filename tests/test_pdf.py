import io

import pytest
from pypdf import PdfWriter

from app.utils.pdf import extract_pdf_text


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _text_pdf(*pages: str) -> bytes:
    """A minimal PDF with one Helvetica text line per page."""
    count = len(pages)
    page_ids = [4 + 2 * i for i in range(count)]
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [" + b" ".join(b"%d 0 R" % pid for pid in page_ids) + b"] /Count %d >>" % count,
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for index, text in enumerate(pages):
        content = b"BT /F1 12 Tf 20 100 Td (" + text.encode("latin-1") + b") Tj ET"
        objects.append(
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 300 200] "
            b"/Resources << /Font << /F1 3 0 R >> >> /Contents %d 0 R >>" % (page_ids[index] + 1)
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream")

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % number + body + b"\nendobj\n")
    xref = out.tell()
    out.write(b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1))
    for offset in offsets:
        out.write(b"%010d 00000 n \n" % offset)
    out.write(b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref))
    return out.getvalue()


def test_extracts_text_layer():
    assert extract_pdf_text(_text_pdf("Build a login page")) == "Build a login page"


def test_pages_are_separated_by_blank_line():
    text = extract_pdf_text(_text_pdf("Login page", "Password reset"))
    assert text == "Login page\n\nPassword reset"


def test_reads_text_from_path(tmp_path):
    path = tmp_path / "spec.pdf"
    path.write_bytes(_text_pdf("Audit log"))
    assert extract_pdf_text(path) == "Audit log"


def test_rejects_non_pdf_bytes():
    with pytest.raises(ValueError, match="Failed to parse PDF"):
        extract_pdf_text(b"this is not a pdf")


def test_rejects_pdf_without_text():
    with pytest.raises(ValueError, match="No extractable text"):
        extract_pdf_text(_blank_pdf())


def test_reads_from_path(tmp_path):
    path = tmp_path / "blank.pdf"
    path.write_bytes(_blank_pdf())
    with pytest.raises(ValueError, match="No extractable text"):
        extract_pdf_text(path)
