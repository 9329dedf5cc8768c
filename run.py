"""
Uvicorn launcher for the Tone app.

Reads port from Settings (env/.env) and starts the server on 0.0.0.0 using the
create_app() factory, so Supabase credentials are checked once at startup.
"""

import os

import uvicorn  # type: ignore

from tone.core.config import get_settings
from tone.core.logger import get_logger

logger = get_logger(__name__)


# PUBLIC_INTERFACE
def main() -> None:
    """Start the FastAPI application with uvicorn."""
    settings = get_settings()
    # Fail before binding the port when credentials are missing.
    settings.require_remote_credentials()
    port = int(settings.PORT or 3001)
    logger.info("Starting uvicorn server", extra={"port": port})
    uvicorn.run(
        "tone.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=port,
        reload=bool(os.getenv("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")),
        log_level="info",
    )


if __name__ == "__main__":
    main()
