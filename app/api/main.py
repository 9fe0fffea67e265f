"""
FastAPI Application

HTTP API server for job-application intake.
"""

import asyncio

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.services.container import config, email_service
from app.utils.limiter import limiter
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Application Intake API",
    description="Receives job applications and relays them to the recruiting inbox",
    version="1.0.0",
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS: one explicit allowlist. Local dev servers, plus FRONTEND_URL and
# comma-separated CORS_ORIGINS from the environment.
_cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
if config.server.frontend_url:
    _cors_origins.append(config.server.frontend_url.rstrip("/"))
for _origin in config.server.cors_origins:
    if _origin not in _cors_origins:
        _cors_origins.append(_origin)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_log_environment():
    """Log the mail configuration in effect (never the secrets themselves)."""
    smtp = config.smtp
    logger.info("[API] Environment check:")
    logger.info(f"[API] SMTP_HOST: {smtp.host}")
    logger.info(f"[API] SMTP_PORT: {smtp.port}")
    logger.info(f"[API] SMTP_MAIL: {'set' if smtp.user else 'not set'}")
    logger.info(f"[API] SMTP_PASSWORD: {'set' if smtp.password else 'not set'}")
    logger.info(f"[API] SENDER_EMAIL: {smtp.recipient or 'not set'}")
    if not smtp.configured:
        logger.warning("[API] SMTP credentials missing - submissions will be rejected")
        return

    # Non-fatal: a slow or unreachable server only produces a log line
    app.state.smtp_check = asyncio.create_task(email_service.verify_connection())


@app.get("/health")
async def health():
    """Liveness check: returns 200 if the process is running."""
    return {"status": "ok"}
