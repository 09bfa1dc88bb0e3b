"""
Data Models
===========
Pydantic models for structured identity-document extraction output.
All models are serializable to JSON for the calling workflow.
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

UNKNOWN_DOCUMENT_MARKER = "unknown document type"


# ─── Enums ────────────────────────────────────────────────────────────────────


class DocumentType(str, Enum):
    """Closed set of supported identity document templates."""
    NATIONAL_ID = "national_id"
    PASSPORT = "passport"
    LICENSE = "license"
    UNKNOWN = "unknown"


class Side(str, Enum):
    """Physical face of the scanned document."""
    FRONT = "front"
    BACK = "back"
    UNKNOWN = "unknown"


class AnomalyType(str, Enum):
    """Data-quality issues detected after extraction."""
    UNKNOWN_DOCUMENT_TYPE = "unknown_document_type"
    UNDETERMINED_SIDE = "undetermined_side"
    MISSING_FIELD = "missing_field"
    INVALID_DATE = "invalid_date"
    INCOMPLETE_NAME = "incomplete_name"
    DATE_ORDER = "date_order"


# ─── Field Records ────────────────────────────────────────────────────────────


class _FieldRecord(BaseModel):
    """Common behaviour of the per-document field records."""

    model_config = ConfigDict(frozen=True)

    @property
    @abstractmethod
    def document_number(self) -> Optional[str]:
        """The number field of the concrete record."""

    def populated_fields(self) -> dict[str, str]:
        """Fields that an explicit match produced, keyed by name."""
        return {
            name: value
            for name, value in self.model_dump(exclude={"document_type"}).items()
            if value is not None
        }


class NationalIdFields(_FieldRecord):
    """Fields printed on a national ID (Aadhaar) card."""
    document_type: Literal[DocumentType.NATIONAL_ID] = DocumentType.NATIONAL_ID
    id_number: Optional[str] = Field(
        default=None,
        description="12-digit number in grouped form, e.g. '1234 5678 9012'",
    )
    name: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = Field(
        default=None,
        description="Only extracted from the back side",
    )

    @property
    def document_number(self) -> Optional[str]:
        return self.id_number


class PassportFields(_FieldRecord):
    """Fields printed on a passport data page."""
    document_type: Literal[DocumentType.PASSPORT] = DocumentType.PASSPORT
    passport_number: Optional[str] = None
    name: Optional[str] = None
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None

    @property
    def document_number(self) -> Optional[str]:
        return self.passport_number


class LicenseFields(_FieldRecord):
    """Fields printed on a driving licence."""
    document_type: Literal[DocumentType.LICENSE] = DocumentType.LICENSE
    license_number: Optional[str] = None
    name: Optional[str] = None
    date_of_birth: Optional[str] = Field(
        default=None,
        description="Best-effort when no birth label is present",
    )
    valid_until: Optional[str] = Field(
        default=None,
        description="Best-effort when no validity label is present",
    )
    address: Optional[str] = Field(
        default=None,
        description="Only extracted from the front side",
    )

    @property
    def document_number(self) -> Optional[str]:
        return self.license_number


ExtractedFields = Annotated[
    Union[NationalIdFields, PassportFields, LicenseFields],
    Field(discriminator="document_type"),
]


# ─── Extraction Result ────────────────────────────────────────────────────────


class ExtractionResult(BaseModel):
    """
    Complete output of one extraction call.
    Carries the raw OCR text so the caller can audit what was interpreted.
    """

    model_config = ConfigDict(frozen=True)

    document_type: DocumentType
    side: Side = Side.UNKNOWN
    fields: Optional[ExtractedFields] = None
    raw_text: str = ""
    error: Optional[str] = None

    @model_validator(mode="after")
    def _fields_match_document_type(self) -> "ExtractionResult":
        if self.document_type == DocumentType.UNKNOWN:
            if self.fields is not None:
                raise ValueError("unknown documents carry no fields")
        elif self.fields is None:
            raise ValueError(f"{self.document_type.value} result requires fields")
        elif self.fields.document_type != self.document_type:
            raise ValueError(
                f"fields for {self.fields.document_type.value} attached to "
                f"{self.document_type.value} result"
            )
        return self

    @classmethod
    def unknown(cls, raw_text: str) -> "ExtractionResult":
        """Minimal result for text that matched no document signature."""
        return cls(
            document_type=DocumentType.UNKNOWN,
            side=Side.UNKNOWN,
            raw_text=raw_text,
            error=UNKNOWN_DOCUMENT_MARKER,
        )

    @computed_field
    @property
    def is_known(self) -> bool:
        return self.document_type != DocumentType.UNKNOWN


# ─── KYC Record ───────────────────────────────────────────────────────────────


class KycRecord(BaseModel):
    """
    Merged view of a front and back scan of the same document,
    shaped like the row the upload workflow persists.
    """

    model_config = ConfigDict(frozen=True)

    document_type: DocumentType
    full_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    id_number: Optional[str] = None
    address: Optional[str] = None
    front: ExtractionResult
    back: ExtractionResult


# ─── Validation ───────────────────────────────────────────────────────────────


class Anomaly(BaseModel):
    """A data-quality issue found in an extraction result."""
    type: AnomalyType
    severity: int = Field(
        ge=0, le=100,
        description="Severity score 0-100"
    )
    message: str
    field: Optional[str] = None


class ValidationReport(BaseModel):
    """Post-extraction completeness report. Policy is left to the caller."""
    document_type: DocumentType = DocumentType.UNKNOWN
    side: Side = Side.UNKNOWN
    missing_fields: list[str] = Field(default_factory=list)
    anomalies: list[Anomaly] = Field(default_factory=list)

    @computed_field
    @property
    def is_complete(self) -> bool:
        return (
            self.document_type != DocumentType.UNKNOWN
            and not self.missing_fields
        )

    @computed_field
    @property
    def anomaly_score(self) -> int:
        """Aggregate anomaly score (0-100)."""
        if not self.anomalies:
            return 0
        return min(100, sum(a.severity for a in self.anomalies))
