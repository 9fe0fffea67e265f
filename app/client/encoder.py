"""
Serializes form state for transmission.

JSON when there is no resume, multipart form data when there is one.
A payload is never a mix of both.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from app.client.form_state import ResumeFile
from app.schemas.application import RESUME_FIELD

JSON = "json"
MULTIPART = "multipart"


@dataclass(frozen=True)
class EncodedPayload:
    kind: str
    json: Optional[Dict[str, str]] = None
    data: Optional[Dict[str, str]] = None
    files: Optional[Dict[str, Tuple[str, bytes, str]]] = None

    def request_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for `httpx.AsyncClient.post`."""
        if self.kind == JSON:
            return {"json": self.json}
        return {"data": self.data, "files": self.files}


def encode_submission(values: Mapping[str, str], resume: Optional[ResumeFile] = None) -> EncodedPayload:
    fields = {name: value or "" for name, value in values.items()}
    if resume is None:
        return EncodedPayload(kind=JSON, json=fields)
    return EncodedPayload(
        kind=MULTIPART,
        data=fields,
        files={RESUME_FIELD: (resume.filename, resume.content, resume.content_type)},
    )
