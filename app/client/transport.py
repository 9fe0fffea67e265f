"""
Submission client.

Posts the encoded form to the intake endpoint and drives the form's
status: idle -> pending -> success | error. One submission may be in
flight per form; nothing is retried.
"""

from enum import Enum
from typing import Optional

import httpx

from app.client.encoder import encode_submission
from app.client.form_state import ApplicationForm, FormStatus
from app.utils.logger import get_logger

logger = get_logger(__name__)

SUCCESS_MESSAGE = "Form submitted successfully! We'll get back to you soon."
FAILURE_MESSAGE = "Failed to submit form. Please try again."
NETWORK_MESSAGE = "Network error. Please check if the server is running."


class SubmissionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class SubmissionClient:
    """Sends one form's submissions to the intake endpoint"""

    def __init__(
        self,
        form: ApplicationForm,
        endpoint: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.form = form
        self.endpoint = endpoint
        self.client = client
        self.timeout = timeout
        self.state = SubmissionState.IDLE

    @property
    def can_submit(self) -> bool:
        return self.state != SubmissionState.PENDING

    async def _post(self, **kwargs) -> httpx.Response:
        if self.client is not None:
            return await self.client.post(self.endpoint, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.endpoint, **kwargs)

    async def submit(self) -> SubmissionState:
        """
        Submit the form once.

        Returns:
            The resulting state; PENDING if a submission was already in flight
        """
        if not self.can_submit:
            logger.warning("[SubmissionClient] Submission already in progress")
            return self.state

        self.state = SubmissionState.PENDING
        self.form.status = FormStatus()
        payload = encode_submission(self.form.values, self.form.resume)

        try:
            response = await self._post(**payload.request_kwargs())
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[SubmissionClient] Request failed: {e}")
            self.form.status = FormStatus("error", NETWORK_MESSAGE)
            self.state = SubmissionState.ERROR
            return self.state
        except BaseException:
            # Cancelled or crashed: re-enable the form before propagating
            self.state = SubmissionState.ERROR
            raise

        if isinstance(data, dict) and data.get("success") is True:
            self.form.reset()
            self.form.status = FormStatus("success", SUCCESS_MESSAGE)
            self.state = SubmissionState.SUCCESS
        else:
            message = data.get("message") if isinstance(data, dict) else None
            self.form.status = FormStatus("error", message or FAILURE_MESSAGE)
            self.state = SubmissionState.ERROR
        return self.state
