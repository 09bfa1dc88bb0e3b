"""
Field Extractors
================
One extractor per document template. Each field is resolved through its
own FallbackChain; a chain that exhausts leaves the field as None.

Address is only attempted on the side where the template prints it
(national ID back, licence front) and never on an undetermined side.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from functools import partial
from typing import Optional

from .address import normalize_address
from .chains import FallbackChain, Strategy, regex_strategies, regex_strategy
from .models import (
    DocumentType,
    LicenseFields,
    NationalIdFields,
    PassportFields,
    Side,
)
from .patterns import (
    DEFAULT_LIBRARY,
    PatternLibrary,
    UnsupportedDocumentTypeError,
)

logger = logging.getLogger(__name__)


# ─── Date Helpers ─────────────────────────────────────────────────────────────


def find_dates(text: str, library: PatternLibrary) -> list[str]:
    """All date-shaped substrings in reading order."""
    return library.date_pattern.findall(text)


def date_on_marker_line(
    text: str,
    marker: re.Pattern,
    date_pattern: re.Pattern,
    last: bool = False,
) -> Optional[str]:
    """Date on the first marker line that holds one."""
    for line in text.splitlines():
        if not marker.search(line):
            continue
        dates = date_pattern.findall(line)
        if dates:
            return dates[-1] if last else dates[0]
    return None


def date_below_marker(
    text: str,
    marker: re.Pattern,
    date_pattern: re.Pattern,
) -> Optional[str]:
    """Date on the line right after a bare marker line ("Date of Birth" / value)."""
    lines = [line for line in text.splitlines() if line.strip()]
    for index, line in enumerate(lines[:-1]):
        if marker.search(line) and not date_pattern.search(line):
            match = date_pattern.search(lines[index + 1])
            if match:
                return match.group(0)
    return None


def _join_groups(match: re.Match) -> str:
    return " ".join(match.groups())


def _upper_group(match: re.Match) -> str:
    return match.group(1).upper()


# ─── Base Extractor ───────────────────────────────────────────────────────────


class FieldExtractor(ABC):
    """
    Base class: builds the field chains once, then applies them to text.
    Subclasses set ``document_type`` and ``fields_model``.
    """

    document_type: DocumentType = DocumentType.UNKNOWN
    fields_model = None

    def __init__(self, library: Optional[PatternLibrary] = None):
        self.library = library or DEFAULT_LIBRARY
        self.profile = self.library.profile(self.document_type)
        self.chains: dict[str, FallbackChain] = self._build_chains()

    @abstractmethod
    def _build_chains(self) -> dict[str, FallbackChain]:
        """Field name to chain, in the order fields are resolved."""

    def _chain(self, field_name: str, strategies) -> FallbackChain:
        return FallbackChain(
            f"{self.document_type.value}.{field_name}", strategies
        )

    def _birth_date_strategies(self) -> list[Strategy]:
        return [
            Strategy("birth_marker_line", partial(
                date_on_marker_line,
                marker=self.library.birth_marker,
                date_pattern=self.library.date_pattern,
            )),
            Strategy("below_birth_marker", partial(
                date_below_marker,
                marker=self.library.birth_marker,
                date_pattern=self.library.date_pattern,
            )),
        ]

    def extract(self, text: str, side: Side):
        """Resolve every field for one side of the document."""
        side = Side(side)
        values = {
            name: chain.resolve(text)
            for name, chain in self.chains.items()
        }

        if self.profile.expects_address(side):
            values["address"] = normalize_address(
                text, self.document_type, self.library
            )
        elif self.profile.address_sides:
            logger.debug(
                f"{self.document_type.value}: address not expected on "
                f"{side.value} side"
            )

        fields = self.fields_model(**values)
        logger.info(
            f"{self.document_type.value}/{side.value}: extracted "
            f"{len(fields.populated_fields())} field(s)"
        )
        return fields


# ─── National ID ──────────────────────────────────────────────────────────────


class NationalIdExtractor(FieldExtractor):
    """Aadhaar-style national ID card."""

    document_type = DocumentType.NATIONAL_ID
    fields_model = NationalIdFields

    def _build_chains(self) -> dict[str, FallbackChain]:
        p = self.profile
        return {
            "id_number": self._chain("id_number", [
                regex_strategy(f"grouped_number[{i}]", pattern, _join_groups)
                for i, pattern in enumerate(p.patterns_for("id_number"))
            ]),
            "name": self._chain("name", [
                Strategy("line_above_birth_marker", self._name_above_birth_marker),
                *regex_strategies("name_pattern", p.patterns_for("name")),
            ]),
            "date_of_birth": self._chain("date_of_birth", [
                *self._birth_date_strategies(),
                *regex_strategies("year_of_birth", p.patterns_for("year_of_birth")),
            ]),
            "gender": self._chain("gender", [
                regex_strategy(f"gender[{i}]", pattern, _upper_group)
                for i, pattern in enumerate(p.patterns_for("gender"))
            ]),
        }

    def _name_above_birth_marker(self, text: str) -> Optional[str]:
        """
        Last meaningful line above the first birth-marker line, skipping
        blank lines and the issuing-government banner.
        """
        lines = text.splitlines()
        for index, line in enumerate(lines):
            if self.library.birth_marker.search(line):
                break
        else:
            return None

        for candidate in reversed(lines[:index]):
            candidate = candidate.strip()
            if not candidate:
                continue
            upper = candidate.upper()
            if any(word in upper for word in self.library.name_skip_words):
                continue
            return candidate
        return None


# ─── Passport ─────────────────────────────────────────────────────────────────


class PassportExtractor(FieldExtractor):
    """Passport data page."""

    document_type = DocumentType.PASSPORT
    fields_model = PassportFields

    def _build_chains(self) -> dict[str, FallbackChain]:
        p = self.profile
        return {
            "passport_number": self._chain("passport_number", regex_strategies(
                "passport_number", p.patterns_for("passport_number")
            )),
            "name": self._chain("name", [
                Strategy("given_name_and_surname", self._composed_name),
                *regex_strategies("name_pattern", p.patterns_for("name")),
                *[
                    regex_strategy(f"mrz_name[{i}]", pattern, self._mrz_name)
                    for i, pattern in enumerate(p.patterns_for("mrz_name"))
                ],
            ]),
            "date_of_birth": self._chain(
                "date_of_birth", self._birth_date_strategies()
            ),
            "nationality": self._chain("nationality", regex_strategies(
                "nationality", p.patterns_for("nationality")
            )),
        }

    def _first_group(self, field_name: str, text: str) -> Optional[str]:
        for pattern in self.profile.patterns_for(field_name):
            match = pattern.search(text)
            if match and match.group(1).strip():
                return match.group(1).strip()
        return None

    def _composed_name(self, text: str) -> Optional[str]:
        given = self._first_group("given_name", text)
        surname = self._first_group("surname", text)
        if given and surname:
            return f"{given} {surname}"
        return None

    @staticmethod
    def _mrz_name(match: re.Match) -> Optional[str]:
        surname, _, given = match.group(1).partition("<<")
        parts = [
            given.replace("<", " ").strip(),
            surname.replace("<", " ").strip(),
        ]
        return " ".join(part for part in parts if part) or None


# ─── Driving Licence ──────────────────────────────────────────────────────────


class LicenseExtractor(FieldExtractor):
    """
    Driving licence.

    When no birth or validity label is found the dates fall back to
    position: the second date found is taken as date of birth (the first
    when only one exists) and the last as the validity date. This mirrors
    the common card layout and is a best-effort approximation.
    """

    document_type = DocumentType.LICENSE
    fields_model = LicenseFields

    def _build_chains(self) -> dict[str, FallbackChain]:
        p = self.profile
        return {
            "license_number": self._chain("license_number", regex_strategies(
                "license_number", p.patterns_for("license_number")
            )),
            "name": self._chain("name", regex_strategies(
                "name_pattern", p.patterns_for("name")
            )),
            "date_of_birth": self._chain("date_of_birth", [
                *self._birth_date_strategies(),
                Strategy("positional_second_date", self._positional_birth_date),
            ]),
            "valid_until": self._chain("valid_until", [
                Strategy("validity_marker_line", partial(
                    date_on_marker_line,
                    marker=self.library.validity_marker,
                    date_pattern=self.library.date_pattern,
                    last=True,
                )),
                Strategy("positional_last_date", self._positional_validity_date),
            ]),
        }

    def _positional_birth_date(self, text: str) -> Optional[str]:
        dates = find_dates(text, self.library)
        if len(dates) >= 2:
            return dates[1]
        return dates[0] if dates else None

    def _positional_validity_date(self, text: str) -> Optional[str]:
        dates = find_dates(text, self.library)
        return dates[-1] if len(dates) >= 2 else None


# ─── Registry ─────────────────────────────────────────────────────────────────


EXTRACTORS: dict[DocumentType, type[FieldExtractor]] = {
    DocumentType.NATIONAL_ID: NationalIdExtractor,
    DocumentType.PASSPORT: PassportExtractor,
    DocumentType.LICENSE: LicenseExtractor,
}


def get_extractor(
    document_type,
    library: Optional[PatternLibrary] = None,
) -> FieldExtractor:
    """
    Instantiate the extractor for a document type.

    Raises:
        UnsupportedDocumentTypeError: for UNKNOWN or any unrecognised tag.
    """
    try:
        extractor_cls = EXTRACTORS[DocumentType(document_type)]
    except (KeyError, ValueError):
        raise UnsupportedDocumentTypeError(
            f"No extractor for document type: {document_type!r}"
        ) from None
    return extractor_cls(library)
