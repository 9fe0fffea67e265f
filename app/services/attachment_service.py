"""
Attachment Service

Stages an uploaded resume in transient storage for the duration of one
request and guarantees it is removed afterwards.
"""

import os
import re
import secrets
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import UploadFile

from app.config import Config
from app.schemas.application import PDF_MIME_TYPE, StagedAttachment
from app.utils.exceptions import AttachmentReason, AttachmentRejected
from app.utils.logger import get_logger

logger = get_logger(__name__)

_CHUNK_SIZE = 1024 * 1024
_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def upload_size(upload: UploadFile) -> int:
    """Byte size of an upload without consuming it."""
    if upload.size is not None:
        return upload.size
    stream = upload.file
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size


class AttachmentService:
    """Service for staging resume uploads"""

    def __init__(self, config: Config):
        self.config = config
        self.upload_dir = Path(config.upload.upload_dir)
        self.max_bytes = config.upload.max_bytes

    def check(self, content_type: Optional[str], size: int) -> None:
        """
        Enforce attachment constraints before anything touches disk.

        Raises:
            AttachmentRejected: If the file is too large or not a PDF
        """
        if size > self.max_bytes:
            raise AttachmentRejected(
                AttachmentReason.TOO_LARGE,
                f"File size must be less than {self.max_bytes // (1024 * 1024)}MB",
            )
        if content_type != PDF_MIME_TYPE:
            raise AttachmentRejected(AttachmentReason.WRONG_TYPE, "Only PDF files are allowed")

    def check_upload(self, upload: UploadFile) -> None:
        self.check(upload.content_type, upload_size(upload))

    def _reserve_path(self, filename: str) -> Path:
        """Create an empty, uniquely named file and return its path."""
        suffix = Path(filename or "").suffix.lower()
        if not _SAFE_SUFFIX.match(suffix):
            suffix = ""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        while True:
            name = f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{suffix}"
            path = self.upload_dir / name
            try:
                # Exclusive create so two requests can never share a file
                with open(path, "xb"):
                    pass
                return path
            except FileExistsError:
                continue

    async def stage(self, upload: UploadFile) -> StagedAttachment:
        """
        Write an upload to transient storage.

        Args:
            upload: Resume part of a multipart request

        Returns:
            StagedAttachment pointing at the written file

        Raises:
            AttachmentRejected: If the upload violates type or size limits
        """
        self.check_upload(upload)

        path = self._reserve_path(upload.filename)
        written = 0
        try:
            await upload.seek(0)
            with open(path, "wb") as out:
                while True:
                    chunk = await upload.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise AttachmentRejected(
                            AttachmentReason.TOO_LARGE,
                            f"File size must be less than {self.max_bytes // (1024 * 1024)}MB",
                        )
                    out.write(chunk)
        except BaseException:
            self.discard(path)
            raise

        logger.info(f"[AttachmentService] Staged {upload.filename} ({written} bytes) at {path.name}")
        return StagedAttachment(
            filename=upload.filename or path.name,
            content_type=upload.content_type or PDF_MIME_TYPE,
            size=written,
            path=path,
        )

    def discard(self, path: Path) -> None:
        try:
            path.unlink()
            logger.debug(f"[AttachmentService] Removed {path.name}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"[AttachmentService] Failed to remove {path}: {e}")

    @asynccontextmanager
    async def staged(self, upload: Optional[UploadFile]) -> AsyncIterator[Optional[StagedAttachment]]:
        """
        Stage `upload` (if any) for the body of the `async with` block and
        delete it on every exit path.
        """
        if upload is None:
            yield None
            return

        attachment = await self.stage(upload)
        try:
            yield attachment
        finally:
            self.discard(attachment.path)
