"""
Application intake Pydantic schemas.

Wire names follow the browser form (camelCase); Python attributes are
snake_case with aliases.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


EDUCATION_OPTIONS = (
    "High School",
    "Diploma",
    "Bachelor's Degree",
    "Master's Degree",
    "PhD",
    "Other",
)

NOTICE_PERIOD_OPTIONS = (
    "Immediate",
    "15 Days",
    "30 Days",
    "45 Days",
    "60 Days",
    "90 Days",
    "More than 90 Days",
)

EXPERIENCE_OPTIONS = (
    "0-1 Years",
    "1-2 Years",
    "2-3 Years",
    "3-5 Years",
    "5-7 Years",
    "7-10 Years",
    "10+ Years",
)

PDF_MIME_TYPE = "application/pdf"
MAX_RESUME_BYTES = 5 * 1024 * 1024  # 5MB

# Field name of the resume part in multipart submissions
RESUME_FIELD = "resume"


class ApplicationSubmission(BaseModel):
    """A validated applicant submission (values already trimmed)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    full_name: str = Field(..., alias="fullName", example="Jane Doe")
    contact_number: str = Field(..., alias="contactNumber", example="9876543210")
    email: str = Field(..., example="jane@example.com")
    education: str = Field(..., example="Bachelor's Degree")
    notice_period: str = Field(..., alias="noticePeriod", example="30 Days")
    current_ctc: str = Field(..., alias="currentCTC", example="12 LPA")
    experience: str = Field(..., example="3-5 Years")
    linkedin_url: str = Field("", alias="linkedinUrl", example="https://linkedin.com/in/janedoe")
    portfolio_link: str = Field("", alias="portfolioLink", example="https://janedoe.dev")


class StagedAttachment(BaseModel):
    """A resume written to transient storage for the duration of one request."""

    filename: str
    content_type: str
    size: int
    path: Path


class OutboundMessage(BaseModel):
    """Composed email, never persisted."""

    sender: str
    recipient: str
    subject: str
    html: str
    text: str
    attachment: Optional[StagedAttachment] = None


class SubmissionResult(BaseModel):
    success: bool
    message: str
    messageId: Optional[str] = None


class DiagnosticsResponse(BaseModel):
    status: str
    smtpConfigured: bool
    smtpHost: str
    smtpPort: int


__all__ = [
    "EDUCATION_OPTIONS",
    "NOTICE_PERIOD_OPTIONS",
    "EXPERIENCE_OPTIONS",
    "PDF_MIME_TYPE",
    "MAX_RESUME_BYTES",
    "RESUME_FIELD",
    "ApplicationSubmission",
    "StagedAttachment",
    "OutboundMessage",
    "SubmissionResult",
    "DiagnosticsResponse",
]
