"""
Intake Service

Runs one application submission through validation, resume staging,
composition and dispatch.
"""

from typing import Any, Mapping, Optional

from fastapi import UploadFile

from app.config import Config
from app.schemas.application import SubmissionResult
from app.services.attachment_service import AttachmentService
from app.services.email_service import EmailService
from app.services.message_composer import MessageComposer
from app.services.validation_service import ValidationService
from app.utils.logger import get_logger

logger = get_logger(__name__)


class IntakeService:
    """Submission pipeline for the /contact endpoint"""

    def __init__(
        self,
        config: Config,
        validator: Optional[ValidationService] = None,
        attachments: Optional[AttachmentService] = None,
        composer: Optional[MessageComposer] = None,
        email: Optional[EmailService] = None,
    ):
        self.config = config
        self.validator = validator or ValidationService()
        self.attachments = attachments or AttachmentService(config)
        self.composer = composer or MessageComposer(config)
        self.email = email or EmailService(config)

    async def submit(
        self,
        fields: Mapping[str, Any],
        resume: Optional[UploadFile] = None,
    ) -> SubmissionResult:
        """
        Process a decoded submission.

        Args:
            fields: Form fields keyed by wire name
            resume: Optional uploaded resume

        Returns:
            SubmissionResult with the delivered message id

        Raises:
            ValidationError: Missing fields or malformed email
            AttachmentRejected: Resume is not a PDF or is too large
            ConfigurationError: SMTP credentials are not configured
            DispatchError: The mail transport failed
        """
        submission = self.validator.validate(fields)
        if resume is not None:
            self.attachments.check_upload(resume)
        self.email.ensure_configured()

        async with self.attachments.staged(resume) as attachment:
            message = self.composer.compose(submission, attachment)
            message_id = await self.email.send(message)

        logger.info(f"[IntakeService] Application from {submission.email} delivered as {message_id}")
        return SubmissionResult(
            success=True,
            message="Application submitted successfully",
            messageId=message_id,
        )
