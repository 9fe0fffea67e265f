"""
Request payload decoding for /contact.

A submission arrives either as a JSON object or as form data (multipart
when a resume is attached). Both are decoded into the same shape: a
mapping of text fields plus an optional resume upload.
"""

import json
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Optional

from fastapi import Request, UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from app.schemas.application import RESUME_FIELD
from app.services.attachment_service import upload_size
from app.utils.exceptions import ValidationError


@dataclass
class DecodedPayload:
    fields: Dict[str, str] = field(default_factory=dict)
    resume: Optional[UploadFile] = None


def _is_form(content_type: str) -> bool:
    return content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    )


async def _decode_json(request: Request) -> DecodedPayload:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid request body")
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body")
    fields = {
        key: "" if value is None else str(value)
        for key, value in body.items()
        if isinstance(value, (str, int, float)) or value is None
    }
    return DecodedPayload(fields=fields)


@asynccontextmanager
async def decode_payload(request: Request) -> AsyncIterator[DecodedPayload]:
    """
    Decode a /contact request body.

    Uploaded files stay open until the `async with` block exits. A resume
    part with no content is treated as absent.

    Raises:
        ValidationError: If the body is unreadable or carries more than one resume
    """
    content_type = request.headers.get("content-type", "").lower()

    if not _is_form(content_type):
        yield await _decode_json(request)
        return

    try:
        form = await request.form()
    except (HTTPException, MultiPartException):
        raise ValidationError("Invalid request body")

    try:
        fields: Dict[str, str] = {}
        resumes = []
        for key, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                # Empty file inputs (with or without a filename) count as no resume
                if key == RESUME_FIELD and upload_size(value) > 0:
                    resumes.append(value)
            else:
                fields[key] = value

        if len(resumes) > 1:
            raise ValidationError("Only one resume file can be uploaded")

        yield DecodedPayload(fields=fields, resume=resumes[0] if resumes else None)
    finally:
        await form.close()
