"""
Address Normalizer
==================
Locates the address region of a document and reassembles its noisy,
multi-line OCR fragments into one canonical comma-separated string.

    locate_address  → first matching region pattern for the document type
    clean_address   → strip labels, collapse breaks/whitespace/commas,
                      drop boilerplate and one-character fragments
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .models import DocumentType
from .patterns import DEFAULT_LIBRARY, PatternLibrary

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"\r\n|\r|\n")
_REPEATED_COMMAS = re.compile(r",\s*,")
_WHITESPACE = re.compile(r"\s+")
_TRAILING_COMMA = re.compile(r",\s*$")


def locate_address(
    text: str,
    document_type: DocumentType,
    library: Optional[PatternLibrary] = None,
) -> Optional[str]:
    """
    Return the raw address region, or None when no pattern matched.

    Raises:
        UnsupportedDocumentTypeError: if document_type has no profile.
    """
    library = library or DEFAULT_LIBRARY
    profile = library.profile(document_type)

    for index, pattern in enumerate(profile.address_patterns):
        match = pattern.search(text)
        if not match:
            continue
        region = match.group(1) if pattern.groups else match.group(0)
        if region and region.strip():
            logger.debug(
                f"{profile.document_type.value}: address region matched "
                f"by pattern {index}"
            )
            return region

    return None


def clean_address(
    region: str,
    library: Optional[PatternLibrary] = None,
) -> Optional[str]:
    """Normalize an address region. Idempotent on its own output."""
    library = library or DEFAULT_LIBRARY

    cleaned = library.address_label_pattern.sub("", region)
    cleaned = _LINE_BREAKS.sub(", ", cleaned)
    cleaned = _REPEATED_COMMAS.sub(",", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned)
    cleaned = _TRAILING_COMMA.sub("", cleaned).strip()

    parts = []
    for part in cleaned.split(","):
        part = part.strip()
        if len(part) < 2:
            continue
        if any(p.search(part) for p in library.address_boilerplate):
            continue
        parts.append(part)

    return ", ".join(parts) or None


def normalize_address(
    text: str,
    document_type: DocumentType,
    library: Optional[PatternLibrary] = None,
) -> Optional[str]:
    """
    Locate and clean the address for a document type.

    Returns None if no region matched or every fragment was filtered out.
    """
    library = library or DEFAULT_LIBRARY
    library.profile(document_type)

    if not isinstance(text, str) or not text.strip():
        return None

    region = locate_address(text, document_type, library)
    if region is None:
        return None

    address = clean_address(region, library)
    if address is None:
        logger.debug("Address region contained only boilerplate")
    return address
