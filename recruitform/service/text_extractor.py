import logging
import re
from typing import List

import fitz  # PyMuPDF

from recruitform.errors import UnreadableDocument

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"https?://[^\s<>\"')\]]+")


def extract_text(document: bytes) -> str:
    """
    Extract plain text from a PDF held in memory.

    Raises UnreadableDocument for anything that is not a readable PDF, and for
    PDFs without a text layer (scanned images): there is nothing to structure.
    """
    if not document:
        raise UnreadableDocument("Empty document.")

    try:
        with fitz.open(stream=document, filetype="pdf") as doc:
            text = "\n".join(page.get_text("text") for page in doc)
    except Exception as e:
        raise UnreadableDocument(f"Could not read document as PDF: {e}") from e

    text = text.strip()
    if not text:
        raise UnreadableDocument("Document contains no extractable text.")

    logger.debug("Extracted %d characters of text.", len(text))
    return text


def extract_links(text: str) -> List[str]:
    """URLs found in the text, de-duplicated, in order of appearance."""
    links: List[str] = []
    for match in _URL_RE.findall(text or ""):
        url = match.rstrip(".,;:")
        if url not in links:
            links.append(url)
    return links
