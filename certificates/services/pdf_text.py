# certificates/services/pdf_text.py
import io
import logging

from pypdf import PdfReader

logger = logging.getLogger(__name__)

PDF_MIME_TYPES = {"application/pdf"}
PREVIEW_CHARS = 500


class PdfTextError(ValueError):
    ...


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Return the text layer of every page, joined by newlines."""
    if not pdf_bytes:
        raise PdfTextError("empty file")
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        logger.warning("pdf parse failed: %s", e)
        raise PdfTextError(str(e)) from e

    text = "\n".join(pages)
    logger.info("extracted %d chars from %d pages", len(text), len(pages))
    return text


def text_meta(text: str) -> dict:
    return {"textLength": len(text), "textPreview": text[:PREVIEW_CHARS]}
