"""
Validation Engine
=================
Post-extraction completeness checks and reporting.

For each extraction result, reports:
    - Missing mandatory fields (per document type and side)
    - Dates that are not real DD-MM-YYYY / DD/MM/YYYY calendar dates
      (a bare birth year is accepted)
    - Names with fewer than two words
    - Licence validity that does not follow the date of birth
    - Unknown document type / undetermined side

Never rejects or raises; acceptance policy belongs to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from .models import (
    Anomaly,
    AnomalyType,
    DocumentType,
    ExtractionResult,
    KycRecord,
    Side,
    ValidationReport,
)
from .patterns import DEFAULT_LIBRARY, PatternLibrary

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%d-%m-%Y", "%d/%m/%Y")

# National ID cards may print only "Year of Birth"
BIRTH_DATE_FORMATS = DATE_FORMATS + ("%Y",)

KYC_REQUIRED_FIELDS = ("full_name", "date_of_birth", "id_number", "address")

# Severity per anomaly type (0-100)
SEVERITY = {
    AnomalyType.UNKNOWN_DOCUMENT_TYPE: 100,
    AnomalyType.UNDETERMINED_SIDE: 40,
    AnomalyType.MISSING_FIELD: 30,
    AnomalyType.INVALID_DATE: 50,
    AnomalyType.INCOMPLETE_NAME: 20,
    AnomalyType.DATE_ORDER: 40,
}


def parse_date(
    value: str,
    formats: tuple[str, ...] = DATE_FORMATS,
) -> Optional[datetime]:
    """Parse a DD-MM-YYYY or DD/MM/YYYY string, None if it is not a real date."""
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def _anomaly(
    anomaly_type: AnomalyType,
    message: str,
    field: Optional[str] = None,
) -> Anomaly:
    return Anomaly(
        type=anomaly_type,
        severity=SEVERITY[anomaly_type],
        message=message,
        field=field,
    )


class ValidationEngine:
    """
    Validates extraction results and KYC records, producing a report.
    """

    def __init__(self, library: Optional[PatternLibrary] = None):
        self.library = library or DEFAULT_LIBRARY

    def validate(self, result: ExtractionResult) -> ValidationReport:
        """
        Run completeness checks on one extraction result.

        Args:
            result: Output of ExtractionEngine.extract().

        Returns:
            ValidationReport with missing fields and anomalies.
        """
        report = ValidationReport(
            document_type=result.document_type,
            side=result.side,
        )

        if not result.is_known:
            report.anomalies.append(_anomaly(
                AnomalyType.UNKNOWN_DOCUMENT_TYPE,
                "Text matched no supported document template",
            ))
            self._log_summary(report)
            return report

        if result.side == Side.UNKNOWN:
            report.anomalies.append(_anomaly(
                AnomalyType.UNDETERMINED_SIDE,
                "Could not tell front from back",
            ))

        profile = self.library.profile(result.document_type)
        values = result.fields.model_dump(exclude={"document_type"})

        # Mandatory fields for this side
        for name in profile.required_fields.get(result.side, ()):
            if not values.get(name):
                report.missing_fields.append(name)
                report.anomalies.append(_anomaly(
                    AnomalyType.MISSING_FIELD,
                    f"Missing mandatory field: {name}",
                    field=name,
                ))

        report.anomalies.extend(self._check_values(values))

        self._log_summary(report)
        return report

    def validate_kyc(self, record: KycRecord) -> ValidationReport:
        """Check that a merged KYC record carries everything an upload needs."""
        report = ValidationReport(document_type=record.document_type)

        if record.document_type == DocumentType.UNKNOWN:
            report.anomalies.append(_anomaly(
                AnomalyType.UNKNOWN_DOCUMENT_TYPE,
                "Neither face matched a supported document template",
            ))

        values = record.model_dump(include=set(KYC_REQUIRED_FIELDS))
        for name in KYC_REQUIRED_FIELDS:
            if not values.get(name):
                report.missing_fields.append(name)
                report.anomalies.append(_anomaly(
                    AnomalyType.MISSING_FIELD,
                    f"Missing mandatory field: {name}",
                    field=name,
                ))

        values["name"] = values.pop("full_name")
        report.anomalies.extend(self._check_values(values))

        self._log_summary(report)
        return report

    def _check_values(self, values: dict) -> list[Anomaly]:
        """Shape checks on whatever values were extracted."""
        anomalies = []

        name = values.get("name")
        if name and len(name.split()) < 2:
            anomalies.append(_anomaly(
                AnomalyType.INCOMPLETE_NAME,
                f"Name has fewer than two words: {name!r}",
                field="name",
            ))

        parsed = {}
        for field_name, formats in (
            ("date_of_birth", BIRTH_DATE_FORMATS),
            ("valid_until", DATE_FORMATS),
        ):
            value = values.get(field_name)
            if not value:
                continue
            parsed[field_name] = parse_date(value, formats)
            if parsed[field_name] is None:
                anomalies.append(_anomaly(
                    AnomalyType.INVALID_DATE,
                    f"Not a valid DD-MM-YYYY date: {value!r}",
                    field=field_name,
                ))

        born = parsed.get("date_of_birth")
        valid_until = parsed.get("valid_until")
        if born and valid_until and valid_until <= born:
            anomalies.append(_anomaly(
                AnomalyType.DATE_ORDER,
                f"Validity {values['valid_until']} is not after "
                f"date of birth {values['date_of_birth']}",
                field="valid_until",
            ))

        return anomalies

    def _log_summary(self, report: ValidationReport):
        level = logging.INFO if report.is_complete else logging.WARNING

        logger.info("=" * 60)
        logger.info("VALIDATION REPORT")
        logger.info("=" * 60)
        logger.info(
            f"Document: {report.document_type.value} / {report.side.value}"
        )
        logger.log(level, f"Missing Fields: {len(report.missing_fields)}")
        for name in report.missing_fields:
            logger.log(level, f"  • {name}")
        logger.info(f"Anomaly Score: {report.anomaly_score}")

        if report.anomalies:
            logger.info("Anomalies:")
            for anomaly in report.anomalies:
                logger.info(f"  • {anomaly.type.value}: {anomaly.message}")

        logger.info("=" * 60)


def validate(
    result: ExtractionResult,
    library: Optional[PatternLibrary] = None,
) -> ValidationReport:
    """Validate with the given (or default) library."""
    return ValidationEngine(library).validate(result)
