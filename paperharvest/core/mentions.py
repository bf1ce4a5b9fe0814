"""
Check whether a paper's PDF actually mentions a software name
"""
from __future__ import annotations

import io
import logging
import re
from typing import List, Sequence

from pypdf import PdfReader


logger = logging.getLogger(__name__)


class MentionError(RuntimeError):
    """Raised when a PDF cannot be read."""


def pdf_text(pdf_bytes: bytes) -> str:
    """
    Extract the text of every readable page

    Raises:
        MentionError: If the document cannot be parsed at all
    """
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        pages = list(reader.pages)
    except Exception as exc:
        raise MentionError("Unable to read PDF") from exc

    parts: List[str] = []
    for page in pages:
        try:
            text = page.extract_text() or ""
        except Exception as exc:
            logger.debug("Skipping unreadable PDF page: %s", exc)
            continue
        if text:
            parts.append(text)
    return "\n".join(parts)


def find_mentions(text: str, terms: Sequence[str]) -> List[str]:
    """Terms that occur in text, case-insensitive, in the order given"""
    haystack = re.sub(r"\s+", " ", text or "").lower()
    return [term for term in terms if term and term.lower() in haystack]


def pdf_mentions(pdf_bytes: bytes, terms: Sequence[str]) -> List[str]:
    return find_mentions(pdf_text(pdf_bytes), terms)
