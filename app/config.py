"""
Configuration Management

Centralized configuration management using environment variables
with proper validation and type safety.
"""

import os
import tempfile
from typing import List, Optional
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env in the project root (resolve to absolute path)
_backend_root = Path(__file__).resolve().parent.parent
_env_path = _backend_root / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=str(_env_path))
else:
    # Also load from current working directory so "python backend_server.py" picks up .env
    load_dotenv()


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read an environment variable, trimming stray whitespace from .env files."""
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


@dataclass
class SMTPConfig:
    """SMTP email configuration"""
    host: str = "smtp.gmail.com"
    port: int = 465
    secure: bool = True
    user: Optional[str] = None
    password: Optional[str] = None
    # Inbox that receives applications; falls back to the sending account
    recipient: Optional[str] = None
    timeout: float = 30.0

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    @property
    def recipient_address(self) -> Optional[str]:
        return self.recipient or self.user


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 7777
    frontend_url: str = ""
    cors_origins: List[str] = field(default_factory=list)


@dataclass
class UploadConfig:
    """Transient resume storage"""
    upload_dir: Path = Path(tempfile.gettempdir()) / "application-uploads"
    max_bytes: int = 5 * 1024 * 1024  # 5MB


@dataclass
class Config:
    """Main application configuration"""

    smtp: SMTPConfig
    server: ServerConfig
    upload: UploadConfig

    # Per-client limit on POST /contact (slowapi syntax)
    CONTACT_RATE_LIMIT: str = "10/minute"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        SMTP credentials are optional here: a missing account or password is
        reported per request as a configuration failure rather than blocking
        startup.

        Returns:
            Configured Config instance

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        smtp_port = _env("SMTP_PORT", "465")
        smtp_secure_raw = _env("SMTP_SECURE")
        if smtp_secure_raw is None:
            smtp_secure = smtp_port == "465"
        else:
            smtp_secure = smtp_secure_raw.lower() == "true"

        cors_origins = []
        for origin in (_env("CORS_ORIGINS", "") or "").split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in cors_origins:
                cors_origins.append(origin)

        return cls(
            smtp=SMTPConfig(
                host=_env("SMTP_HOST", "smtp.gmail.com"),
                port=int(smtp_port),
                secure=smtp_secure,
                user=_env("SMTP_MAIL"),
                password=_env("SMTP_PASSWORD"),
                recipient=_env("SENDER_EMAIL"),
                timeout=float(_env("SMTP_TIMEOUT", "30")),
            ),
            server=ServerConfig(
                host=_env("SERVER_HOST", "0.0.0.0"),
                port=int(_env("SERVER_PORT", "7777")),
                frontend_url=_env("FRONTEND_URL", ""),
                cors_origins=cors_origins,
            ),
            upload=UploadConfig(
                upload_dir=Path(_env("UPLOAD_DIR") or UploadConfig.upload_dir),
                max_bytes=int(_env("MAX_RESUME_BYTES", str(5 * 1024 * 1024))),
            ),
            CONTACT_RATE_LIMIT=_env("CONTACT_RATE_LIMIT", "10/minute"),
            LOG_LEVEL=_env("LOG_LEVEL", "INFO"),
            LOG_FORMAT=_env("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        )


def get_config() -> Config:
    """
    Get configuration from environment variables.

    Returns:
        Configuration instance
    """
    return Config.from_env()
