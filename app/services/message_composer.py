"""
Message Composer

Turns a validated submission into the email sent to the recruiting inbox.
"""

from typing import List, Optional, Tuple

from app.config import Config
from app.schemas.application import ApplicationSubmission, OutboundMessage, StagedAttachment

_HTML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
})


def escape_html(value: Optional[str]) -> str:
    """Escape &, <, >, " and ' for safe interpolation into HTML."""
    if not value:
        return ""
    return str(value).translate(_HTML_ESCAPES)


def _single_line(value: str) -> str:
    """Collapse CR/LF and other whitespace runs for use in a header."""
    return " ".join(value.split())


_ROW = (
    '<tr>'
    '<td style="padding: 8px 0; font-weight: bold; color: #374151; width: 40%;">{label}:</td>'
    '<td style="padding: 8px 0; color: #1f2937;">{value}</td>'
    '</tr>'
)
_LINK = '<a href="{url}" style="color: #3b82f6; text-decoration: none;">{url}</a>'


class MessageComposer:
    """Builds OutboundMessage instances"""

    def __init__(self, config: Config):
        self.config = config

    def _personal_rows(self, submission: ApplicationSubmission) -> List[Tuple[str, str, bool]]:
        # (label, raw value, render as link)
        rows = [
            ("Full Name", submission.full_name, False),
            ("Contact Number", submission.contact_number, False),
            ("Email Address", submission.email, False),
        ]
        if submission.portfolio_link:
            rows.append(("Portfolio/Resume Link", submission.portfolio_link, True))
        if submission.linkedin_url:
            rows.append(("LinkedIn URL", submission.linkedin_url, True))
        return rows

    def _professional_rows(self, submission: ApplicationSubmission) -> List[Tuple[str, str, bool]]:
        return [
            ("Highest Education", submission.education, False),
            ("Experience", submission.experience, False),
            ("Current CTC", submission.current_ctc, False),
            ("Notice Period", submission.notice_period, False),
        ]

    def _html_table(self, rows: List[Tuple[str, str, bool]]) -> str:
        cells = []
        for label, value, is_link in rows:
            safe = escape_html(value)
            cells.append(_ROW.format(label=label, value=_LINK.format(url=safe) if is_link else safe))
        return "\n".join(cells)

    def _create_email_html(
        self,
        submission: ApplicationSubmission,
        attachment: Optional[StagedAttachment],
    ) -> str:
        resume_note = ""
        if attachment is not None:
            resume_note = (
                '<p style="color: #374151; margin-top: 20px;">'
                f'Resume attached: <strong>{escape_html(attachment.filename)}</strong></p>'
            )
        return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f9fafb;">
  <h2 style="color: #1f2937; border-bottom: 2px solid #3b82f6; padding-bottom: 10px;">New Application Form Submission</h2>
  <div style="background-color: white; padding: 20px; border-radius: 8px; margin-top: 20px;">
    <h3 style="color: #3b82f6; margin-top: 0;">Personal Information</h3>
    <table style="width: 100%; border-collapse: collapse;">
{self._html_table(self._personal_rows(submission))}
    </table>
  </div>
  <div style="background-color: white; padding: 20px; border-radius: 8px; margin-top: 20px;">
    <h3 style="color: #3b82f6; margin-top: 0;">Professional Information</h3>
    <table style="width: 100%; border-collapse: collapse;">
{self._html_table(self._professional_rows(submission))}
    </table>
  </div>
  {resume_note}
</div>
"""

    def _create_email_text(
        self,
        submission: ApplicationSubmission,
        attachment: Optional[StagedAttachment],
    ) -> str:
        lines = ["New Application Form Submission", "", "Personal Information:"]
        lines += [f"{label}: {value}" for label, value, _ in self._personal_rows(submission)]
        lines += ["", "Professional Information:"]
        lines += [f"{label}: {value}" for label, value, _ in self._professional_rows(submission)]
        if attachment is not None:
            lines += ["", f"Resume attached: {attachment.filename}"]
        return "\n".join(lines) + "\n"

    def compose(
        self,
        submission: ApplicationSubmission,
        attachment: Optional[StagedAttachment] = None,
    ) -> OutboundMessage:
        """
        Compose the recruiting email for a submission.

        Args:
            submission: Validated submission
            attachment: Staged resume, if one was uploaded

        Returns:
            OutboundMessage ready for dispatch
        """
        smtp = self.config.smtp
        return OutboundMessage(
            sender=smtp.user or "",
            recipient=smtp.recipient_address or "",
            subject=f"Application Form Submission from {_single_line(escape_html(submission.full_name))}",
            html=self._create_email_html(submission, attachment),
            text=self._create_email_text(submission, attachment),
            attachment=attachment,
        )
