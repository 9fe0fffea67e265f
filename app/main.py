"""
Application entrypoint.

Re-exports the FastAPI `app` instance from `app.api.main` with the
intake routers registered and logging configured.
"""

from app.api.main import app  # type: ignore  # noqa: F401
from app.utils.logger import get_logger, setup_logging
from app.config import get_config

config = get_config()
setup_logging(config)
logger = get_logger(__name__)

from app.api import contact as contact_api

app.include_router(contact_api.router)
