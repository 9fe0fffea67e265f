from app.config import get_config
from app.services.attachment_service import AttachmentService
from app.services.email_service import EmailService
from app.services.intake_service import IntakeService
from app.services.message_composer import MessageComposer
from app.services.validation_service import ValidationService

config = get_config()

# Initialize services
validation_service = ValidationService()
attachment_service = AttachmentService(config)
message_composer = MessageComposer(config)
email_service = EmailService(config)
intake_service = IntakeService(
    config,
    validator=validation_service,
    attachments=attachment_service,
    composer=message_composer,
    email=email_service,
)


def get_intake_service() -> IntakeService:
    """FastAPI dependency; tests override it with their own pipeline."""
    return intake_service
