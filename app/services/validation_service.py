"""
Validation Service

Checks raw submission fields before any side effect happens.
"""

import re
from typing import Any, List, Mapping

from app.schemas.application import ApplicationSubmission
from app.utils.exceptions import ValidationError
from app.utils.logger import get_logger

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Wire name -> label shown to the applicant, in form order
REQUIRED_FIELDS = (
    ("fullName", "Full Name"),
    ("contactNumber", "Contact Number"),
    ("education", "Education"),
    ("noticePeriod", "Notice Period"),
    ("email", "Email"),
    ("currentCTC", "Current CTC"),
    ("experience", "Experience"),
)

OPTIONAL_FIELDS = (
    ("linkedinUrl", "LinkedIn URL"),
    ("portfolioLink", "Portfolio Link"),
)

# Every field is single-line; CR/LF would also end up in mail headers
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class ValidationService:
    """Validates and normalizes raw request fields"""

    def missing_fields(self, fields: Mapping[str, Any]) -> List[str]:
        """Labels of every required field that is absent or blank."""
        return [label for key, label in REQUIRED_FIELDS if not _clean(fields.get(key))]

    def validate(self, fields: Mapping[str, Any]) -> ApplicationSubmission:
        """
        Validate raw submission fields.

        Args:
            fields: Decoded request fields keyed by wire name

        Returns:
            Trimmed ApplicationSubmission

        Raises:
            ValidationError: If required fields are missing, the email is malformed,
                or a value contains line breaks
        """
        missing = self.missing_fields(fields)
        if missing:
            logger.info(f"[ValidationService] Missing required fields: {', '.join(missing)}")
            raise ValidationError(
                f"Please fill all required fields: {', '.join(missing)}",
                fields=missing,
            )

        email = _clean(fields.get("email"))
        if not EMAIL_PATTERN.match(email):
            logger.info("[ValidationService] Rejected malformed email address")
            raise ValidationError("Please provide a valid email address", fields=["Email"])

        multiline = [
            label
            for key, label in REQUIRED_FIELDS + OPTIONAL_FIELDS
            if CONTROL_CHARS.search(_clean(fields.get(key)))
        ]
        if multiline:
            logger.info(f"[ValidationService] Control characters in: {', '.join(multiline)}")
            raise ValidationError(
                f"Line breaks and control characters are not allowed in: {', '.join(multiline)}",
                fields=multiline,
            )

        values = {key: _clean(fields.get(key)) for key, _ in REQUIRED_FIELDS}
        values.update({key: _clean(fields.get(key)) for key, _ in OPTIONAL_FIELDS})
        return ApplicationSubmission(**values)
