import asyncio
from email.generator import BytesGenerator
from io import BytesIO

import aiosmtplib
import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.schemas.application import ApplicationSubmission, StagedAttachment
from app.services.attachment_service import AttachmentService
from app.services.email_service import EmailService, classify_failure
from app.services.message_composer import MessageComposer, escape_html
from app.services.validation_service import ValidationService
from app.utils.exceptions import (
    AttachmentReason,
    AttachmentRejected,
    ConfigurationError,
    DispatchError,
    DispatchFailure,
    ValidationError,
)
from conftest import PDF_BYTES, VALID_FIELDS, FakeTransport, make_config, staged_files


def make_upload(content: bytes, filename: str = "resume.pdf", content_type: str = "application/pdf") -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        size=len(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def make_submission(**overrides) -> ApplicationSubmission:
    return ValidationService().validate({**VALID_FIELDS, **overrides})


# --- validation ---------------------------------------------------------------

def test_validator_reports_all_missing_fields():
    with pytest.raises(ValidationError) as exc:
        ValidationService().validate({"contactNumber": "123"})

    assert exc.value.fields == [
        "Full Name", "Education", "Notice Period", "Email", "Current CTC", "Experience",
    ]
    assert exc.value.message.startswith("Please fill all required fields:")
    assert "Full Name" in exc.value.message and "Email" in exc.value.message


def test_validator_rejects_bad_email():
    for email in ("not-an-email", "a@b", "a b@c.com", "@example.com"):
        with pytest.raises(ValidationError, match="valid email address"):
            make_submission(email=email)


def test_validator_rejects_line_breaks():
    with pytest.raises(ValidationError) as exc:
        make_submission(fullName="Jane\nBcc: evil@example.com", linkedinUrl="https://x.com\r\nX-Extra: 1")

    assert exc.value.fields == ["Full Name", "LinkedIn URL"]


def test_validator_trims_values():
    submission = make_submission(fullName="  Jane Doe  ", portfolioLink=" https://jane.dev ")

    assert submission.full_name == "Jane Doe"
    assert submission.portfolio_link == "https://jane.dev"
    assert submission.current_ctc == "12 LPA"


# --- composition --------------------------------------------------------------

def test_escape_html_replaces_all_special_characters():
    assert escape_html("""<a href="x">Tom & Jerry's</a>""") == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#039;s&lt;/a&gt;"
    )
    assert escape_html("") == ""
    assert escape_html(None) == ""


def test_text_body_is_raw_and_html_body_is_escaped(tmp_path):
    message = MessageComposer(make_config(tmp_path)).compose(make_submission(fullName="A & B"))

    assert "Full Name: A & B" in message.text
    assert "A &amp; B" in message.html
    assert "A & B" not in message.html
    assert message.subject == "Application Form Submission from A &amp; B"
    assert message.sender == "careers@example.com"
    assert message.recipient == "recruiting@example.com"


def test_values_are_escaped_exactly_once(tmp_path):
    message = MessageComposer(make_config(tmp_path)).compose(make_submission(currentCTC="&amp;"))

    assert "&amp;amp;" in message.html
    assert "&amp;amp;amp;" not in message.html
    assert "Current CTC: &amp;" in message.text


def test_optional_links_only_when_present(tmp_path):
    composer = MessageComposer(make_config(tmp_path))

    without = composer.compose(make_submission(linkedinUrl="", portfolioLink=""))
    assert "LinkedIn URL" not in without.html
    assert "LinkedIn URL" not in without.text
    assert "Portfolio/Resume Link" not in without.text

    with_links = composer.compose(make_submission(portfolioLink="https://jane.dev"))
    assert 'href="https://jane.dev"' in with_links.html
    assert "Portfolio/Resume Link: https://jane.dev" in with_links.text
    assert "LinkedIn URL: https://linkedin.com/in/janedoe" in with_links.text


def test_subject_is_a_single_header_line(tmp_path):
    config = make_config(tmp_path)
    submission = ApplicationSubmission(**{**VALID_FIELDS, "fullName": "Jane\r\nBcc: evil@example.com"})
    message = MessageComposer(config).compose(submission)

    assert message.subject == "Application Form Submission from Jane Bcc: evil@example.com"

    mime = EmailService(config, transport=FakeTransport()).build_mime(message, "<id@example.com>")
    BytesGenerator(BytesIO()).flatten(mime)
    assert mime["Bcc"] is None


def test_recipient_falls_back_to_account(tmp_path):
    config = make_config(tmp_path)
    config.smtp.recipient = None

    message = MessageComposer(config).compose(make_submission())

    assert message.recipient == "careers@example.com"


# --- staging ------------------------------------------------------------------

def test_non_pdf_is_rejected_without_writing(tmp_path):
    config = make_config(tmp_path)
    service = AttachmentService(config)

    with pytest.raises(AttachmentRejected) as exc:
        asyncio.run(service.stage(make_upload(b"hello", "notes.txt", "text/plain")))

    assert exc.value.reason == AttachmentReason.WRONG_TYPE
    assert staged_files(config) == []


def test_oversize_is_rejected_regardless_of_type(tmp_path):
    service = AttachmentService(make_config(tmp_path))
    too_big = 5 * 1024 * 1024 + 1

    for content_type in ("application/pdf", "image/png"):
        with pytest.raises(AttachmentRejected) as exc:
            service.check(content_type, too_big)
        assert exc.value.reason == AttachmentReason.TOO_LARGE

    service.check("application/pdf", 5 * 1024 * 1024)


def test_staged_file_is_removed_on_error(tmp_path):
    config = make_config(tmp_path)
    service = AttachmentService(config)
    seen = []

    async def run():
        async with service.staged(make_upload(PDF_BYTES)) as attachment:
            seen.append(attachment)
            assert attachment.path.read_bytes() == PDF_BYTES
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        asyncio.run(run())

    assert seen[0].path.suffix == ".pdf"
    assert seen[0].size == len(PDF_BYTES)
    assert not seen[0].path.exists()
    assert staged_files(config) == []


def test_staged_names_are_unique(tmp_path):
    service = AttachmentService(make_config(tmp_path))

    async def stage_many():
        return await asyncio.gather(*(service.stage(make_upload(PDF_BYTES)) for _ in range(20)))

    staged = asyncio.run(stage_many())

    assert len({attachment.path for attachment in staged}) == 20
    for attachment in staged:
        service.discard(attachment.path)


def test_staged_without_upload_yields_none(tmp_path):
    service = AttachmentService(make_config(tmp_path))

    async def run():
        async with service.staged(None) as attachment:
            return attachment

    assert asyncio.run(run()) is None


# --- dispatch -----------------------------------------------------------------

@pytest.mark.parametrize(
    "error, kind",
    [
        (aiosmtplib.SMTPAuthenticationError(535, "auth failed"), DispatchFailure.AUTH),
        (aiosmtplib.SMTPConnectError("refused"), DispatchFailure.CONNECTION),
        (aiosmtplib.SMTPServerDisconnected("gone"), DispatchFailure.CONNECTION),
        (ConnectionRefusedError("refused"), DispatchFailure.CONNECTION),
        (aiosmtplib.SMTPConnectTimeoutError("slow"), DispatchFailure.TIMEOUT),
        (aiosmtplib.SMTPTimeoutError("slow"), DispatchFailure.TIMEOUT),
        (asyncio.TimeoutError(), DispatchFailure.TIMEOUT),
        (aiosmtplib.SMTPResponseException(550, "Mailbox unavailable"), DispatchFailure.OTHER),
    ],
)
def test_classify_failure(error, kind):
    assert classify_failure(error).kind == kind


def test_unclassified_failure_uses_provider_message():
    error = classify_failure(aiosmtplib.SMTPResponseException(550, "Mailbox unavailable"))

    assert error.message == "Mailbox unavailable"
    assert error.status_code == 500


def test_send_requires_credentials(tmp_path):
    config = make_config(tmp_path, configured=False)
    transport = FakeTransport()
    message = MessageComposer(config).compose(make_submission())

    with pytest.raises(ConfigurationError):
        asyncio.run(EmailService(config, transport=transport).send(message))
    assert transport.calls == []


def test_send_wraps_transport_error(tmp_path):
    config = make_config(tmp_path)
    transport = FakeTransport(error=aiosmtplib.SMTPConnectTimeoutError("timed out"))
    message = MessageComposer(config).compose(make_submission())

    with pytest.raises(DispatchError) as exc:
        asyncio.run(EmailService(config, transport=transport).send(message))

    assert exc.value.kind == DispatchFailure.TIMEOUT
    assert exc.value.message == "Email server timed out. Please try again later."


def test_build_mime_includes_both_bodies(tmp_path):
    config = make_config(tmp_path)
    path = tmp_path / "cv.pdf"
    path.write_bytes(PDF_BYTES)
    attachment = StagedAttachment(filename="cv.pdf", content_type="application/pdf", size=len(PDF_BYTES), path=path)
    message = MessageComposer(config).compose(make_submission(), attachment)

    mime = EmailService(config, transport=FakeTransport()).build_mime(message, "<id@example.com>")

    types = [part.get_content_type() for part in mime.walk()]
    assert types == [
        "multipart/mixed", "multipart/alternative", "text/plain", "text/html", "application/pdf",
    ]
    assert "Resume attached: cv.pdf" in message.text


class FakeSMTP:
    """Stands in for aiosmtplib.SMTP in connection checks."""

    def __init__(self, error=None, **kwargs):
        self.error = error
        self.kwargs = kwargs
        self.is_connected = False
        self.quit_called = False

    async def connect(self):
        self.is_connected = True

    async def login(self, username, password):
        if self.error is not None:
            raise self.error

    async def quit(self):
        self.quit_called = True
        self.is_connected = False

    def close(self):
        self.is_connected = False


def test_verify_connection_logs_in_and_quits(tmp_path):
    created = []

    def factory(**kwargs):
        created.append(FakeSMTP(**kwargs))
        return created[-1]

    service = EmailService(make_config(tmp_path), transport=FakeTransport(), smtp_factory=factory)

    assert asyncio.run(service.verify_connection()) is True
    assert created[0].kwargs["hostname"] == "smtp.example.com"
    assert created[0].kwargs["use_tls"] is True
    assert created[0].quit_called is True


def test_verify_connection_failure_is_not_fatal(tmp_path):
    created = []

    def factory(**kwargs):
        created.append(FakeSMTP(error=aiosmtplib.SMTPAuthenticationError(535, "bad"), **kwargs))
        return created[-1]

    service = EmailService(make_config(tmp_path), transport=FakeTransport(), smtp_factory=factory)

    assert asyncio.run(service.verify_connection()) is False
    assert created[0].quit_called is True


def test_verify_connection_skipped_without_credentials(tmp_path):
    def factory(**kwargs):
        raise AssertionError("should not connect")

    service = EmailService(make_config(tmp_path, configured=False), smtp_factory=factory)

    assert asyncio.run(service.verify_connection()) is False
