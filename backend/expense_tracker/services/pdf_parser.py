# expense_tracker/services/pdf_parser.py
import logging

import pdfplumber

logger = logging.getLogger(__name__)


def extract_pdf_text(path: str) -> str:
    """
    Load every page of a PDF and return their text joined with newlines,
    page order preserved. Pages without a text layer contribute an empty string.
    Raises whatever pdfplumber raises for unreadable files.
    """
    pages = []
    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            pages.append(page.extract_text() or "")
    text = "\n".join(pages)
    logger.debug("extracted %d chars from %d pdf pages (%s)", len(text), len(pages), path)
    return text
