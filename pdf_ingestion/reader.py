"""
Turn an uploaded loan document into text for the normalizer.

PDFs are extracted page by page with pdfplumber; everything else (JSON, plain text,
markdown exports) is decoded as UTF-8.

Usage:
  text = read_document_text(raw_bytes, "facility_agreement.pdf", "application/pdf")
"""
from __future__ import annotations

import io
from pathlib import Path

import pdfplumber
import structlog

from services.errors import UnparsableInput

logger = structlog.get_logger(__name__)


def is_pdf(file_name: str, content_type: str) -> bool:
    return content_type == "application/pdf" or file_name.lower().endswith(".pdf")


def extract_pdf_text(raw: bytes) -> str:
    """Extract all page text from PDF bytes, pages joined by blank lines."""
    text_parts: list[str] = []
    with pdfplumber.open(io.BytesIO(raw)) as pdf:
        for page in pdf.pages:
            t = page.extract_text()
            if t:
                text_parts.append(t)
    return "\n\n".join(text_parts)


def read_document_text(raw: bytes, file_name: str, content_type: str) -> str:
    if not is_pdf(file_name, content_type):
        return raw.decode("utf-8", errors="replace")
    try:
        text = extract_pdf_text(raw)
    except Exception as e:
        logger.warning("pdf_extract_failed", file_name=file_name, error=str(e))
        raise UnparsableInput(f"Could not read PDF document {Path(file_name).name or 'upload'}") from e
    if not text.strip():
        raise UnparsableInput("PDF document contains no extractable text")
    return text
