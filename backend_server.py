"""
Run FastAPI HTTP Server

Starts the FastAPI server that receives job applications.
"""

import os
import uvicorn
from app.config import get_config

if __name__ == "__main__":
    config = get_config()

    # Hosting platforms provide PORT; otherwise fall back to config
    port = int(os.environ.get("PORT", config.server.port))
    host = os.environ.get("HOST", config.server.host)

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=False,  # Disable reload for production
        log_level=config.LOG_LEVEL.lower(),
    )
