"""
Pattern Library
===============
Immutable regex and keyword tables for every supported document template.

The library is built once at import time (``DEFAULT_LIBRARY``) and handed
explicitly to the classifier, side detector, extractors, address normalizer
and validator. Nothing in it is mutated after construction.

Profiles are stored in classification priority order:
    License → National ID → Passport
Licence numbers can incidentally resemble substrings checked later, and
"address" appears on the back of every template, so the order is part of
the contract.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .models import DocumentType, Side


class UnsupportedDocumentTypeError(ValueError):
    """Raised when a caller explicitly asks for a template that does not exist."""


# ─── Shared Patterns ──────────────────────────────────────────────────────────

# "01-01-1990", "01/01/1990"
DATE_PATTERN = re.compile(r"\b\d{2}[-/]\d{2}[-/]\d{4}\b")

# "DOB", "D.O.B", "Date of Birth", "Year of Birth", "जन्म तिथि"
BIRTH_MARKER = re.compile(
    r"(?:\bD\.?O\.?B\b|\bbirth\b|जन्म)", re.IGNORECASE
)

# "Valid Till", "Validity (NT)", "Valid Upto", "Date of Expiry"
VALIDITY_MARKER = re.compile(
    r"\bvalid(?:ity)?\b(?![ \t]*from)|\bexpir", re.IGNORECASE
)

# Relationship and label prefixes removed from address fragments
ADDRESS_LABEL_PATTERN = re.compile(
    r"(?:\bAddress\s*:|पता\s*:|\b[CSDW]/O\b\s*:?)", re.IGNORECASE
)

# Address fragments that belong to the issuing authority, not the holder
ADDRESS_BOILERPLATE = (
    re.compile(r"help@", re.IGNORECASE),
    re.compile(r"uidai\.gov\.in", re.IGNORECASE),
    re.compile(r"\S+@\S+\.\S+"),
    re.compile(r"\bwww\.", re.IGNORECASE),
)

# Lines that sit above the holder's name on a national ID front
NAME_SKIP_WORDS = ("GOVERNMENT", "INDIA")

# Door number such as "12/4", never a piece of a date like "01/01/1990"
_DOOR_NUMBER = r"(?<![\d/])\d+/\d+(?![\d/])"

# Boilerplate that terminates an address block on a national ID back
_ADDRESS_TERMINATOR = r"(?=help@|uidai\.gov\.in|\Z)"

# Text that is already one comma-joined address line
_NORMALIZED_ADDRESS = re.compile(r"\A[^\n,]+(?:,[ \t]*[^\n,]+)+\Z")


# ─── Per-Template Patterns ────────────────────────────────────────────────────

NATIONAL_ID_NUMBER = re.compile(r"\b(\d{4})\s(\d{4})\s(\d{4})\b")
PASSPORT_NUMBER = re.compile(r"\b[A-Z]\d{7}\b")
LICENSE_NUMBER = re.compile(r"\b[A-Z]{2}\d{2}[A-Z0-9]\d{7,}\b")

# Licence number only counts as evidence next to a licence label; the bare
# shape also fits a passport file number ("MA1069876543210")
LABELLED_LICENSE_NUMBER = re.compile(
    r"(?i:\bDL\b|\blicen[cs]e\b)[ \t]*(?i:no\b)?\.?[ \t]*:?[ \t]*"
    r"[A-Z]{2}[- ]?\d{2}[A-Z0-9]\d{7,}\b"
)

# "File No.: MA1069876543210" on a passport back
PASSPORT_FILE_NUMBER = re.compile(
    r"\bFile[ \t]+(?:No\b\.?|Number\b)[ \t]*:?[ \t]*[A-Z]{2}\d{13}\b",
    re.IGNORECASE,
)

GENDER_PATTERN = re.compile(r"\b(FEMALE|MALE|TRANSGENDER)\b", re.IGNORECASE)


@dataclass(frozen=True)
class DocumentProfile:
    """Everything the pipeline knows about one document template."""

    document_type: DocumentType
    signatures: tuple[re.Pattern, ...]
    front_keywords: tuple[str, ...]
    back_keywords: tuple[str, ...]
    field_patterns: Mapping[str, tuple[re.Pattern, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    address_patterns: tuple[re.Pattern, ...] = ()
    address_sides: frozenset[Side] = frozenset()
    required_fields: Mapping[Side, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def patterns_for(self, field_name: str) -> tuple[re.Pattern, ...]:
        return self.field_patterns.get(field_name, ())

    def expects_address(self, side: Side) -> bool:
        return side in self.address_sides


@dataclass(frozen=True)
class PatternLibrary:
    """Read-only collection of document profiles plus shared tables."""

    profiles: tuple[DocumentProfile, ...]
    date_pattern: re.Pattern = DATE_PATTERN
    birth_marker: re.Pattern = BIRTH_MARKER
    validity_marker: re.Pattern = VALIDITY_MARKER
    address_label_pattern: re.Pattern = ADDRESS_LABEL_PATTERN
    address_boilerplate: tuple[re.Pattern, ...] = ADDRESS_BOILERPLATE
    name_skip_words: tuple[str, ...] = NAME_SKIP_WORDS

    def __post_init__(self):
        seen = [p.document_type for p in self.profiles]
        if DocumentType.UNKNOWN in seen:
            raise ValueError("UNKNOWN cannot have a profile")
        if len(seen) != len(set(seen)):
            raise ValueError(f"Duplicate document profiles: {seen}")

    @property
    def classification_order(self) -> tuple[DocumentType, ...]:
        return tuple(p.document_type for p in self.profiles)

    def profile(self, document_type) -> DocumentProfile:
        """
        Look up the profile for a document type.

        Raises:
            UnsupportedDocumentTypeError: for UNKNOWN or any unrecognised tag.
        """
        try:
            document_type = DocumentType(document_type)
        except ValueError:
            raise UnsupportedDocumentTypeError(
                f"Unsupported document type: {document_type!r}"
            ) from None

        for profile in self.profiles:
            if profile.document_type == document_type:
                return profile

        raise UnsupportedDocumentTypeError(
            f"Unsupported document type: {document_type.value}"
        )


# ─── Default Library ──────────────────────────────────────────────────────────


def _license_profile() -> DocumentProfile:
    return DocumentProfile(
        document_type=DocumentType.LICENSE,
        signatures=(
            re.compile(r"driving\s+licen[cs]e", re.IGNORECASE),
            LABELLED_LICENSE_NUMBER,
            re.compile(r"\bTN\d{2}Z\d{8}\b"),
        ),
        front_keywords=(
            "driving licence", "driving license", "transport",
            "date of birth", "dob", "photo",
        ),
        back_keywords=(
            "blood group", "donor", "valid", "address", "signature",
            "authority",
        ),
        field_patterns=MappingProxyType({
            "license_number": (LICENSE_NUMBER,),
            "name": (
                # "Name: N KEERTHIVELAN"
                re.compile(r"\bName[ \t]*:[ \t]*([A-Za-z][A-Za-z. ]*[A-Za-z.])"),
                # "N.KEERTHIVELAN"
                re.compile(r"\b([A-Z]\.[A-Z]+[A-Za-z]+)"),
                # "KUMAR Ravi"
                re.compile(r"\b([A-Z]+[ \t]*[A-Z]+[a-z]+)"),
            ),
        }),
        address_patterns=(
            re.compile(
                r"(?:Permanent|Present)\s+Address[\s:]+"
                r"([^\n]+(?:\n[^\n]+)*?)(?=\n\s*\n|\n[A-Z]|\s*\Z)",
                re.IGNORECASE,
            ),
            re.compile(
                r"(?:Address|पता)[\s:]+"
                r"([^\n]+(?:\n[^\n]+)*?)(?=\n\s*\n|\n[A-Z]|\s*\Z)",
                re.IGNORECASE,
            ),
            re.compile(
                r"^[^\n]*?" + _DOOR_NUMBER + r"[^\n]*",
                re.MULTILINE,
            ),
            _NORMALIZED_ADDRESS,
        ),
        address_sides=frozenset({Side.FRONT}),
        required_fields=MappingProxyType({
            Side.FRONT: ("license_number", "name", "date_of_birth"),
            Side.BACK: (),
            Side.UNKNOWN: ("license_number",),
        }),
    )


def _national_id_profile() -> DocumentProfile:
    return DocumentProfile(
        document_type=DocumentType.NATIONAL_ID,
        signatures=(
            NATIONAL_ID_NUMBER,
            re.compile(r"aadhaar", re.IGNORECASE),
            re.compile(r"uidai", re.IGNORECASE),
        ),
        front_keywords=(
            "government of india", "आधार", "aadhaar", "dob",
            "date of birth", "year of birth",
        ),
        back_keywords=(
            "address", "पता", "unique identification authority", "uidai",
            "authentication", "signature",
        ),
        field_patterns=MappingProxyType({
            "id_number": (NATIONAL_ID_NUMBER,),
            "gender": (GENDER_PATTERN,),
            "year_of_birth": (
                re.compile(r"Year\s+of\s+Birth[ \t]*[:/]?[ \t]*(\d{4})\b",
                           re.IGNORECASE),
            ),
            "name": (
                re.compile(
                    r"(?:\bName|नाम)[ \t]*:[ \t]*([^\n]*?)[ \t]*"
                    r"(?=\n|DOB|Year|जन्म|Date|\Z)",
                    re.IGNORECASE,
                ),
                re.compile(r"\bTo[ \t]*:[ \t]*([^\n]*?)[ \t]*(?=\n|S/O|D/O|\Z)"),
                re.compile(
                    r"\b([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*)\s*"
                    r"(?=\d{4}\s\d{4}\s\d{4})"
                ),
                re.compile(r"\b([A-Z][a-z]+[ \t]+[A-Z])\.?[ \t]*(?=\n|DOB|\d{4}|\Z)"),
                re.compile(r"^([A-Z][a-z]+[ \t]+[A-Z]\.?)[ \t]*$", re.MULTILINE),
            ),
        }),
        address_patterns=(
            # "Address: S/O: Ramesh Kumar, 12/4 MG Road, ..."
            re.compile(
                r"Address\s*:\s*(?:S/O:?[^,]*,)?\s*(?:\d+/\d+)?.*?"
                + _ADDRESS_TERMINATOR,
                re.IGNORECASE | re.DOTALL,
            ),
            # "S/O Ramesh Kumar, ..."
            re.compile(
                r"S/O:?\s*[^,]+,\s*(?:\d+/\d+)?.*?" + _ADDRESS_TERMINATOR,
                re.IGNORECASE | re.DOTALL,
            ),
            # Line holding a door number, through to the boilerplate
            re.compile(
                r"^[^\n]*?" + _DOOR_NUMBER + r".*?" + _ADDRESS_TERMINATOR,
                re.MULTILINE | re.DOTALL,
            ),
            _NORMALIZED_ADDRESS,
        ),
        address_sides=frozenset({Side.BACK}),
        required_fields=MappingProxyType({
            Side.FRONT: ("id_number", "name", "date_of_birth"),
            Side.BACK: ("address",),
            Side.UNKNOWN: ("id_number",),
        }),
    )


def _passport_profile() -> DocumentProfile:
    return DocumentProfile(
        document_type=DocumentType.PASSPORT,
        signatures=(
            re.compile(r"passport", re.IGNORECASE),
            re.compile(r"^P<[A-Z]{3}", re.MULTILINE),
            PASSPORT_FILE_NUMBER,
        ),
        front_keywords=(
            "republic of india", "passport", "date of birth", "nationality",
        ),
        back_keywords=(
            "holder's signature", "spouse", "address", "file number",
        ),
        field_patterns=MappingProxyType({
            "passport_number": (PASSPORT_NUMBER,),
            "given_name": (
                re.compile(
                    r"\bGiven[ \t]+Names?(?:\(s\))?[ \t]*:[ \t]*([^\n]*?)[ \t]*"
                    r"(?=\n|Surname|DOB|\Z)",
                    re.IGNORECASE,
                ),
            ),
            "surname": (
                re.compile(
                    r"\bSurname[ \t]*:[ \t]*([^\n]*?)[ \t]*(?=\n|Given|\Z)",
                    re.IGNORECASE,
                ),
            ),
            "name": (
                re.compile(
                    r"\b(?:Given[ \t]+Names?(?:\(s\))?|Name)[ \t]*:[ \t]*"
                    r"([^\n]*?)[ \t]*(?=\n|Surname|DOB|\Z)",
                    re.IGNORECASE,
                ),
                # Label on its own line, value below
                re.compile(
                    r"\bGiven[ \t]+Names?(?:\(s\))?[ \t]*:?[ \t]*\n[ \t]*([^\n]+)",
                    re.IGNORECASE,
                ),
                re.compile(
                    r"\bSurname[ \t]*:[ \t]*([^\n]*?)[ \t]*(?=\n|Given|\Z)",
                    re.IGNORECASE,
                ),
            ),
            # "P<INDSHARMA<<PRIYA<<<<<<<<"
            "mrz_name": (re.compile(r"^P<[A-Z]{3}([A-Z<]+)$", re.MULTILINE),),
            "nationality": (
                re.compile(r"\bNationality[ \t]*:[ \t]*([^\n]*?)[ \t]*$",
                           re.IGNORECASE | re.MULTILINE),
                re.compile(r"\bNationality[ \t]*:?[ \t]*\n[ \t]*([A-Za-z][A-Za-z ]*)",
                           re.IGNORECASE),
            ),
        }),
        required_fields=MappingProxyType({
            Side.FRONT: ("passport_number", "name", "date_of_birth"),
            Side.BACK: (),
            Side.UNKNOWN: ("passport_number",),
        }),
    )


def build_default_library() -> PatternLibrary:
    """Assemble the library in classification priority order."""
    return PatternLibrary(
        profiles=(
            _license_profile(),
            _national_id_profile(),
            _passport_profile(),
        )
    )


DEFAULT_LIBRARY = build_default_library()
