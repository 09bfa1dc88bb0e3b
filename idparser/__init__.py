"""
ID Parser
=========
Structured field extraction from OCR text of Indian identity documents.

Architecture:
    - Pattern Library: Immutable per-template regexes and keyword tables
    - Classifier: Picks the document template from signature patterns
    - Side Detector: Tells the front scan from the back scan
    - Field Extractors: Per-field fallback chains (name, DOB, number, ...)
    - Address Normalizer: Reassembles multi-line address fragments
    - Validation Engine: Flags missing mandatory fields and bad dates

Version: 1.0.0
"""

__version__ = "1.0.0"

from .engine import EngineConfig, ExtractionEngine
from .models import DocumentType, ExtractionResult, KycRecord, Side
from .patterns import DEFAULT_LIBRARY, UnsupportedDocumentTypeError

__all__ = [
    "DEFAULT_LIBRARY",
    "DocumentType",
    "EngineConfig",
    "ExtractionEngine",
    "ExtractionResult",
    "KycRecord",
    "Side",
    "UnsupportedDocumentTypeError",
]
