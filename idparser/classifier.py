"""
Document Type Classifier
========================
Maps raw OCR text to one of the supported document types by checking
each profile's signature patterns in the library's fixed priority order.
The first profile with a matching signature wins; no match means UNKNOWN.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import DocumentType
from .patterns import DEFAULT_LIBRARY, PatternLibrary

logger = logging.getLogger(__name__)


class DocumentClassifier:
    """Ordered signature matcher over a PatternLibrary."""

    def __init__(self, library: Optional[PatternLibrary] = None):
        self.library = library or DEFAULT_LIBRARY

    def classify(self, text) -> DocumentType:
        """
        Classify a block of OCR text.

        Never raises: empty or non-string input is simply UNKNOWN.
        """
        if not isinstance(text, str) or not text.strip():
            logger.debug("Empty or non-text input, classified as unknown")
            return DocumentType.UNKNOWN

        for profile in self.library.profiles:
            for signature in profile.signatures:
                if signature.search(text):
                    logger.info(
                        f"Classified as {profile.document_type.value} "
                        f"(signature: {signature.pattern!r})"
                    )
                    return profile.document_type

        logger.info("No document signature matched")
        return DocumentType.UNKNOWN


def classify(text, library: Optional[PatternLibrary] = None) -> DocumentType:
    """Classify text with the given (or default) library."""
    return DocumentClassifier(library).classify(text)
