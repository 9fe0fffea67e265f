from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from app.api.payloads import decode_payload
from app.schemas.application import DiagnosticsResponse, SubmissionResult
from app.services.container import config, get_intake_service
from app.services.intake_service import IntakeService
from app.utils.exceptions import IntakeError
from app.utils.limiter import limiter
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Application intake endpoints
router = APIRouter(tags=["Contact"])


def _failure(status_code: int, message: str) -> JSONResponse:
    body = SubmissionResult(success=False, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness text."""
    return "Hello World from server"


@router.get("/test", response_model=DiagnosticsResponse)
async def diagnostics():
    """Report whether mail credentials are configured (diagnostic only)."""
    return DiagnosticsResponse(
        status="Server is running",
        smtpConfigured=config.smtp.configured,
        smtpHost=config.smtp.host,
        smtpPort=config.smtp.port,
    )


@router.post("/contact", response_model=SubmissionResult)
@limiter.limit(config.CONTACT_RATE_LIMIT)
async def contact(request: Request, intake: IntakeService = Depends(get_intake_service)):
    """
    Receive an application form submission.

    Accepts JSON, or multipart form data with an optional `resume` PDF,
    and relays the application to the recruiting inbox.
    """
    try:
        async with decode_payload(request) as payload:
            logger.info(
                f"[ContactAPI] Received application submission "
                f"(fields={sorted(payload.fields)}, resume={payload.resume is not None})"
            )
            result = await intake.submit(payload.fields, payload.resume)
        return JSONResponse(status_code=200, content=result.model_dump(exclude_none=True))

    except IntakeError as e:
        logger.warning(f"[ContactAPI] {type(e).__name__}: {e.message}")
        return _failure(e.status_code, e.message)
    except Exception as e:
        logger.error(f"[ContactAPI] Unexpected error processing application: {e}", exc_info=True)
        return _failure(500, "Failed to process application. Please try again later.")
