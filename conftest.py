import os

# Must be set before app modules read the environment
os.environ["CONTACT_RATE_LIMIT"] = "10000/minute"

from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from app.config import Config, ServerConfig, SMTPConfig, UploadConfig
from app.main import app
from app.services.container import get_intake_service
from app.services.email_service import EmailService
from app.services.intake_service import IntakeService


VALID_FIELDS = {
    "fullName": "Jane Doe",
    "contactNumber": "9876543210",
    "education": "Bachelor's Degree",
    "noticePeriod": "30 Days",
    "email": "jane@example.com",
    "linkedinUrl": "https://linkedin.com/in/janedoe",
    "currentCTC": "12 LPA",
    "experience": "3-5 Years",
}

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


class FakeTransport:
    """Stands in for aiosmtplib.send."""

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error
        self.calls: List[tuple] = []
        self.staged_during_send: List[Path] = []
        self.upload_dir: Optional[Path] = None

    async def __call__(self, message, **kwargs):
        self.calls.append((message, kwargs))
        if self.upload_dir is not None and self.upload_dir.exists():
            self.staged_during_send = list(self.upload_dir.iterdir())
        if self.error is not None:
            raise self.error
        return {}, "250 OK"


def make_config(tmp_path: Path, configured: bool = True) -> Config:
    return Config(
        smtp=SMTPConfig(
            host="smtp.example.com",
            port=465,
            secure=True,
            user="careers@example.com" if configured else None,
            password="app-password" if configured else None,
            recipient="recruiting@example.com",
        ),
        server=ServerConfig(),
        upload=UploadConfig(upload_dir=tmp_path / "uploads"),
    )


def staged_files(config: Config) -> List[Path]:
    upload_dir = Path(config.upload.upload_dir)
    if not upload_dir.exists():
        return []
    return list(upload_dir.iterdir())


@pytest.fixture
def config(tmp_path):
    return make_config(tmp_path)


@pytest.fixture
def transport(config):
    fake = FakeTransport()
    fake.upload_dir = Path(config.upload.upload_dir)
    return fake


@pytest.fixture
def intake(config, transport):
    return IntakeService(config, email=EmailService(config, transport=transport))


@pytest.fixture
def client(intake):
    app.dependency_overrides[get_intake_service] = lambda: intake
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
