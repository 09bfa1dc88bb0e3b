"""
Side Detector
=============
Decides whether OCR text came from the front or the back of a document.

Front keywords are checked first, in list order, then back keywords in
list order. The first hit wins, so text carrying vocabulary from both
faces always resolves the same way.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import DocumentType, Side
from .patterns import DEFAULT_LIBRARY, PatternLibrary

logger = logging.getLogger(__name__)


class SideDetector:
    """Keyword-driven front/back detection."""

    def __init__(self, library: Optional[PatternLibrary] = None):
        self.library = library or DEFAULT_LIBRARY

    def detect(self, text, document_type: DocumentType) -> Side:
        """
        Detect the scanned side for a known document type.

        Raises:
            UnsupportedDocumentTypeError: if document_type has no profile.
        """
        profile = self.library.profile(document_type)

        if not isinstance(text, str):
            return Side.UNKNOWN

        lowered = text.lower()

        for keyword in profile.front_keywords:
            if keyword.lower() in lowered:
                logger.info(
                    f"{profile.document_type.value}: front side "
                    f"(keyword: {keyword!r})"
                )
                return Side.FRONT

        for keyword in profile.back_keywords:
            if keyword.lower() in lowered:
                logger.info(
                    f"{profile.document_type.value}: back side "
                    f"(keyword: {keyword!r})"
                )
                return Side.BACK

        logger.info(f"{profile.document_type.value}: side undetermined")
        return Side.UNKNOWN


def detect_side(
    text,
    document_type: DocumentType,
    library: Optional[PatternLibrary] = None,
) -> Side:
    """Detect the side with the given (or default) library."""
    return SideDetector(library).detect(text, document_type)
