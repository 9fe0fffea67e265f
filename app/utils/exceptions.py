"""
Intake error taxonomy.

Every failure the submission pipeline can report to a caller derives from
`IntakeError`, which carries the user-facing message and the HTTP status the
API layer answers with.
"""

from enum import Enum
from typing import Iterable, Optional


class IntakeError(Exception):
    """Base class for failures rendered as `{success: false, message}`."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(IntakeError):
    """Missing required field(s) or malformed email."""

    status_code = 400

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class AttachmentReason(str, Enum):
    WRONG_TYPE = "wrong_type"
    TOO_LARGE = "too_large"


class AttachmentRejected(IntakeError):
    """Uploaded resume is not a PDF or exceeds the size limit."""

    status_code = 400

    def __init__(self, reason: AttachmentReason, message: str):
        super().__init__(message)
        self.reason = reason


class ConfigurationError(IntakeError):
    """Mail credentials are not configured on the server."""

    status_code = 500


class DispatchFailure(str, Enum):
    AUTH = "auth"
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    OTHER = "other"


DISPATCH_MESSAGES = {
    DispatchFailure.AUTH: "Email authentication failed. Please check your SMTP credentials.",
    DispatchFailure.CONNECTION: "Could not connect to email server. Please check your SMTP settings.",
    DispatchFailure.TIMEOUT: "Email server timed out. Please try again later.",
}


class DispatchError(IntakeError):
    """Mail transport failed; `kind` classifies the provider failure."""

    status_code = 500

    def __init__(self, kind: DispatchFailure, detail: Optional[str] = None):
        if kind in DISPATCH_MESSAGES:
            message = DISPATCH_MESSAGES[kind]
        else:
            message = detail or "Failed to send email"
        super().__init__(message)
        self.kind = kind
        self.detail = detail
