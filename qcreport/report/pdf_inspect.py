from __future__ import annotations

from io import BytesIO

from pypdf import PdfReader


def count_pdf_pages(pdf_bytes: bytes) -> int:
    return len(PdfReader(BytesIO(pdf_bytes)).pages)


def extract_page_texts(pdf_bytes: bytes) -> list[str]:
    reader = PdfReader(BytesIO(pdf_bytes))
    return [(page.extract_text() or '').strip() for page in reader.pages]


def pdf_title(pdf_bytes: bytes) -> str | None:
    metadata = PdfReader(BytesIO(pdf_bytes)).metadata
    if metadata is None:
        return None
    return metadata.title
