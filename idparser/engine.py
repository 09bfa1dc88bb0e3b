"""
Extraction Engine
=================
Main orchestrator that combines classification, side detection, field
extraction and address normalization into one extraction call.

Usage:
    engine = ExtractionEngine(config)
    result = engine.extract(ocr_text)
    # result is an ExtractionResult carrying fields and the raw text

Architecture:
    OCR text → DocumentClassifier → DocumentType → SideDetector → Side →
    FieldExtractor (+ Address Normalizer) → ExtractionResult
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .classifier import DocumentClassifier
from .extractors import EXTRACTORS, FieldExtractor, get_extractor
from .models import (
    DocumentType,
    ExtractionResult,
    KycRecord,
)
from .patterns import DEFAULT_LIBRARY, PatternLibrary
from .side_detector import SideDetector

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class EngineConfig:
    """Configuration for the extraction engine."""

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Pattern tables
    library: PatternLibrary = DEFAULT_LIBRARY


class ExtractionEngine:
    """
    Identity document extraction engine.

    Orchestrates the pipeline:
        1. Document type classification
        2. Side detection
        3. Field extraction (fallback chains per field)
        4. Address normalization (where the side carries one)

    Holds only immutable tables, so one engine can serve many threads.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._setup_logging()

        library = self.config.library
        self.classifier = DocumentClassifier(library)
        self.side_detector = SideDetector(library)
        self.extractors: dict[DocumentType, FieldExtractor] = {
            document_type: get_extractor(document_type, library)
            for document_type in library.classification_order
            if document_type in EXTRACTORS
        }

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        package_logger = logging.getLogger("idparser")
        package_logger.setLevel(log_level)

        # Console handler
        if not package_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            package_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                self.config.log_file, encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            package_logger.addHandler(file_handler)

    def extract(
        self,
        text,
        document_type: Optional[DocumentType] = None,
    ) -> ExtractionResult:
        """
        Extract structured fields from one OCR text block.

        Args:
            text: OCR output for a single scanned image.
            document_type: Skip classification and use this template.

        Returns:
            ExtractionResult; UNKNOWN type when no signature matched.

        Raises:
            UnsupportedDocumentTypeError: if document_type is given but
                has no extractor (including UNKNOWN).
        """
        raw_text = self._coerce_text(text)
        extractor = None
        if document_type is not None:
            extractor = self._extractor_for(document_type)

        start_time = time.time()
        working_text = raw_text.replace("\r\n", "\n").replace("\r", "\n")

        # ── Step 1: Classification ────────────────────────────────────
        if extractor is None:
            document_type = self.classifier.classify(working_text)
            if document_type == DocumentType.UNKNOWN:
                logger.warning("Unclassifiable document, skipping extraction")
                return ExtractionResult.unknown(raw_text)
            extractor = self._extractor_for(document_type)

        # ── Step 2: Side detection ────────────────────────────────────
        side = self.side_detector.detect(working_text, extractor.document_type)

        # ── Step 3: Field extraction ──────────────────────────────────
        fields = extractor.extract(working_text, side)

        result = ExtractionResult(
            document_type=extractor.document_type,
            side=side,
            fields=fields,
            raw_text=raw_text,
        )

        elapsed = time.time() - start_time
        logger.info(
            f"Extraction complete in {elapsed * 1000:.1f}ms: "
            f"{result.document_type.value}/{result.side.value}"
        )
        return result

    def extract_kyc(self, front_text, back_text) -> KycRecord:
        """
        Extract both faces of one document and merge them into a KYC record.

        Identity fields come from the front (falling back to the back);
        the address comes from whichever face produced one, back first.
        A back face that cannot be classified on its own is extracted as
        the front's document type.
        """
        front = self.extract(front_text)
        back = self.extract(back_text)

        if front.is_known and not back.is_known:
            logger.info(
                f"Back face unclassified, re-extracting as "
                f"{front.document_type.value}"
            )
            back = self.extract(back_text, document_type=front.document_type)
        elif back.is_known and not front.is_known:
            front = self.extract(front_text, document_type=back.document_type)

        if (
            front.is_known and back.is_known
            and front.document_type != back.document_type
        ):
            logger.warning(
                f"Front ({front.document_type.value}) and back "
                f"({back.document_type.value}) disagree on document type"
            )

        document_type = front.document_type
        if document_type == DocumentType.UNKNOWN:
            document_type = back.document_type

        def pick(attribute: str, *results: ExtractionResult) -> Optional[str]:
            for result in results:
                if result.fields is None:
                    continue
                value = getattr(result.fields, attribute, None)
                if value:
                    return value
            return None

        record = KycRecord(
            document_type=document_type,
            full_name=pick("name", front, back),
            date_of_birth=pick("date_of_birth", front, back),
            id_number=pick("document_number", front, back),
            address=pick("address", back, front),
            front=front,
            back=back,
        )
        logger.info(
            f"KYC record assembled for {record.document_type.value}"
        )
        return record

    def _extractor_for(self, document_type) -> FieldExtractor:
        """Resolve an extractor, raising for unsupported tags."""
        try:
            return self.extractors[DocumentType(document_type)]
        except (KeyError, ValueError):
            # Delegate so the caller gets the library's error type
            return get_extractor(document_type, self.config.library)

    @staticmethod
    def _coerce_text(text) -> str:
        """Turn any input into text; non-text degrades to an empty string."""
        if isinstance(text, str):
            return text
        if isinstance(text, (bytes, bytearray)):
            return bytes(text).decode("utf-8", errors="replace")
        if text is not None:
            logger.warning(
                f"Non-text input of type {type(text).__name__}, "
                f"treating as empty"
            )
        return ""
