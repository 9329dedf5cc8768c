from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from ..core.config import Settings, get_settings
from ..core.logger import get_logger
from ..routers.auth import router as auth_router
from ..routers.debug import router as debug_router
from ..routers.health import router as health_router
from ..routers.home import router as home_router
from ..routers.items import router as items_router
from ..routers.logs import router as logs_router
from ..routers.profile import router as profile_router
from ..routers.public import router as public_router
from ..services.remote import RemoteService, create_remote_service
from ..services.session import SessionController
from ..services.workspace import Workspace

logger = get_logger(__name__)


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, remote: Optional[RemoteService] = None) -> FastAPI:
    """Build the application and its process-wide service handles.

    The remote service is created here (or injected by the caller) exactly once
    and shared through app.state; missing Supabase credentials abort startup.
    """
    settings = settings or get_settings()
    remote = remote or create_remote_service(settings)
    session = SessionController(remote, settings)
    workspace = Workspace(remote, session, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session.start()
        logger.info("Startup complete.", extra={"signed_in": session.session is not None})
        yield
        session.stop()
        logger.info("Shutdown complete.")

    # Initialize FastAPI application with metadata and orjson for performance
    app = FastAPI(
        title=settings.APP_NAME,
        description="Log reactions to the media you watch, read and play, and share them on a public page.",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Health", "description": "Service health and diagnostics"},
            {"name": "Auth", "description": "Magic-link sign in"},
            {"name": "Home", "description": "Signed-in home view"},
            {"name": "Items", "description": "Catalog search and creation"},
            {"name": "Logs", "description": "Reaction records"},
            {"name": "Profile", "description": "Profile settings and avatar"},
            {"name": "Public", "description": "Public profile pages"},
        ],
    )

    # CORS configuration driven by settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.remote = remote
    app.state.session = session
    app.state.workspace = workspace

    app.include_router(home_router)
    app.include_router(public_router)
    app.include_router(auth_router)
    app.include_router(items_router)
    app.include_router(logs_router)
    app.include_router(profile_router)
    app.include_router(health_router)
    app.include_router(debug_router)

    logger.info("FastAPI app initialized", extra={"app_name": settings.APP_NAME, "env": settings.APP_ENV})
    return app


if __name__ == "__main__":
    # Allow running as: python -m tone.api.main
    import os
    import uvicorn  # type: ignore

    port = int(os.getenv("PORT", "3001"))
    uvicorn.run("tone.api.main:create_app", factory=True, host="0.0.0.0", port=port, log_level="info")
