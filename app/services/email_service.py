"""
Email Service

Relays composed application emails to the recruiting inbox via SMTP.
"""

import asyncio
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any, Awaitable, Callable, Optional

import aiosmtplib

from app.config import Config
from app.schemas.application import OutboundMessage
from app.utils.exceptions import ConfigurationError, DispatchError, DispatchFailure
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Same call shape as aiosmtplib.send
SMTPTransport = Callable[..., Awaitable[Any]]


def classify_failure(error: BaseException) -> DispatchError:
    """Map a transport exception onto the closed set of dispatch failures."""
    # Timeout checks come first: SMTPConnectTimeoutError is also an SMTPConnectError,
    # and TimeoutError is an OSError.
    if isinstance(error, (aiosmtplib.SMTPTimeoutError, asyncio.TimeoutError, TimeoutError)):
        kind = DispatchFailure.TIMEOUT
    elif isinstance(error, aiosmtplib.SMTPAuthenticationError):
        kind = DispatchFailure.AUTH
    elif isinstance(error, (aiosmtplib.SMTPConnectError, aiosmtplib.SMTPServerDisconnected, OSError)):
        kind = DispatchFailure.CONNECTION
    else:
        kind = DispatchFailure.OTHER
    detail = getattr(error, "message", None) or str(error) or None
    return DispatchError(kind, detail)


class EmailService:
    """Service for sending application emails"""

    def __init__(
        self,
        config: Config,
        transport: Optional[SMTPTransport] = None,
        smtp_factory: Callable[..., aiosmtplib.SMTP] = aiosmtplib.SMTP,
    ):
        self.config = config
        self.transport = transport or aiosmtplib.send
        self.smtp_factory = smtp_factory

    @property
    def enabled(self) -> bool:
        return self.config.smtp.configured

    def ensure_configured(self) -> None:
        """
        Raises:
            ConfigurationError: If the SMTP account or password is missing
        """
        if not self.enabled:
            logger.error("[EmailService] SMTP credentials not configured")
            raise ConfigurationError("Email service not configured. Please contact administrator.")

    async def verify_connection(self) -> bool:
        """
        Connect and log in to the SMTP server without sending anything.

        Returns:
            True if the server accepted the connection and credentials
        """
        if not self.enabled:
            logger.warning("[EmailService] SMTP not configured - skipping connection check")
            return False

        smtp = self.config.smtp
        client = self.smtp_factory(
            hostname=smtp.host,
            port=smtp.port,
            use_tls=smtp.secure,
            start_tls=not smtp.secure,
            timeout=smtp.timeout,
        )
        try:
            await client.connect()
            await client.login(smtp.user, smtp.password)
        except Exception as e:
            error = classify_failure(e)
            logger.error(f"[EmailService] Email configuration check failed ({error.kind.value}): {e}")
            return False
        finally:
            if client.is_connected:
                try:
                    await client.quit()
                except aiosmtplib.SMTPException:
                    client.close()

        logger.info("[EmailService] Email server is ready to send messages")
        return True

    def build_mime(self, message: OutboundMessage, message_id: str) -> MIMEMultipart:
        """Render an OutboundMessage as a MIME tree."""
        body = MIMEMultipart("alternative")
        body.attach(MIMEText(message.text, "plain", "utf-8"))
        body.attach(MIMEText(message.html, "html", "utf-8"))

        if message.attachment is None:
            mime = body
        else:
            mime = MIMEMultipart("mixed")
            mime.attach(body)
            with open(message.attachment.path, "rb") as fh:
                part = MIMEApplication(fh.read(), _subtype="pdf")
            part.add_header("Content-Disposition", "attachment", filename=message.attachment.filename)
            mime.attach(part)

        mime["Subject"] = message.subject
        mime["From"] = message.sender
        mime["To"] = message.recipient
        mime["Message-ID"] = message_id
        return mime

    async def send(self, message: OutboundMessage) -> str:
        """
        Send a composed message.

        Args:
            message: OutboundMessage from the composer

        Returns:
            The Message-ID of the delivered email

        Raises:
            ConfigurationError: If SMTP credentials are missing
            DispatchError: If the transport fails
        """
        self.ensure_configured()
        smtp = self.config.smtp

        domain = message.sender.rpartition("@")[2] or None
        message_id = make_msgid(domain=domain)
        mime = self.build_mime(message, message_id)

        # SMTP_SECURE=true means direct TLS (port 465), false means STARTTLS (port 587)
        use_tls = smtp.secure
        start_tls = not smtp.secure

        logger.info(f"[EmailService] Sending application email to {message.recipient}")
        try:
            await self.transport(
                mime,
                hostname=smtp.host,
                port=smtp.port,
                use_tls=use_tls,
                start_tls=start_tls,
                username=smtp.user,
                password=smtp.password,
                timeout=smtp.timeout,
            )
        except Exception as e:
            error = classify_failure(e)
            logger.error(f"[EmailService] Send failed ({error.kind.value}): {e}", exc_info=True)
            raise error from e

        logger.info(f"[EmailService] Email sent successfully: {message_id}")
        return message_id
