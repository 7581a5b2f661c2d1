from __future__ import annotations

import io
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError


def extract_pdf_text(source: str | Path | bytes) -> str:
    """Return the text of every page, pages separated by a blank line.

    Raises ValueError when the file is not a readable PDF or holds no text
    (scanned pages without a text layer).
    """
    data = source if isinstance(source, bytes) else Path(source).expanduser().read_bytes()
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except PdfReadError as exc:
        raise ValueError(f"Failed to parse PDF: {exc}") from exc

    text = "\n\n".join(page for page in pages if page)
    if not text.strip():
        raise ValueError("No extractable text found in PDF")
    return text
