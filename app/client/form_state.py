"""
Client-side form state for the application form.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from app.schemas.application import MAX_RESUME_BYTES, PDF_MIME_TYPE


FORM_FIELDS = (
    "fullName",
    "contactNumber",
    "education",
    "noticePeriod",
    "email",
    "linkedinUrl",
    "currentCTC",
    "experience",
    "portfolioLink",
)


@dataclass
class ResumeFile:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FormStatus:
    type: str = ""  # "", "success" or "error"
    message: str = ""


def _empty_values() -> Dict[str, str]:
    return {name: "" for name in FORM_FIELDS}


@dataclass
class ApplicationForm:
    """Current field values, selected resume and status banner."""

    values: Dict[str, str] = field(default_factory=_empty_values)
    resume: Optional[ResumeFile] = None
    status: FormStatus = field(default_factory=FormStatus)

    def set(self, name: str, value: str) -> None:
        if name not in self.values:
            raise KeyError(f"Unknown form field: {name}")
        self.values[name] = value

    def select_attachment(self, file: ResumeFile) -> bool:
        """
        Select a resume. Non-PDF or oversize files are refused with a status
        message and leave the current selection untouched.
        """
        if file.content_type != PDF_MIME_TYPE:
            self.status = FormStatus("error", "Please upload a PDF file only.")
            return False
        if file.size > MAX_RESUME_BYTES:
            self.status = FormStatus("error", "File size must be less than 5MB.")
            return False
        self.resume = file
        self.status = FormStatus()
        return True

    def reset(self) -> None:
        """Clear every field and the resume after a successful submission."""
        self.values = _empty_values()
        self.resume = None
