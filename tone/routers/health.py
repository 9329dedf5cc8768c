from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..api.deps import get_app_settings, get_remote
from ..core.config import Settings
from ..core.errors import RemoteError
from ..core.logger import get_logger
from ..models.schemas import HealthResponse
from ..services.remote import RemoteService

router = APIRouter(prefix="/health", tags=["Health"])

_logger = get_logger(__name__)


# PUBLIC_INTERFACE
class RemotePingResponse(BaseModel):
    """Response schema for the Supabase connectivity check."""
    ok: bool = Field(..., description="True if the query executed successfully")
    table: Optional[str] = Field(None, description="Table used for the ping")
    count: Optional[int] = Field(None, description="Number of rows returned (0 or 1)")
    error: Optional[str] = Field(None, description="Error message if any")
    meta: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=HealthResponse,
    summary="Service health",
    description="Liveness endpoint. Always returns 200 when the app is up; no remote calls are made.",
    responses={
        200: {"description": "Service is healthy"},
    },
)
def get_health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    _logger.info("Health check", extra={"env": settings.APP_ENV})
    return HealthResponse(status="ok")


# PUBLIC_INTERFACE
@router.get(
    "/remote",
    response_model=RemotePingResponse,
    summary="Ping Supabase",
    description="Runs a select limit(1) through the Supabase client to verify the store is reachable.",
)
def remote_ping(
    table: str = Query(default="items", description="Table to query for select limit(1)"),
    remote: RemoteService = Depends(get_remote),
) -> RemotePingResponse:
    """
    Perform a minimal Supabase HTTP call to confirm availability.

    Returns ok=False with the error message rather than failing the request.
    """
    try:
        rows = remote.select(table, limit=1)
    except RemoteError as exc:
        return RemotePingResponse(ok=False, table=table, count=0, error=exc.detail, meta={"code": exc.code})
    return RemotePingResponse(ok=True, table=table, count=min(len(rows), 1), error=None, meta={})
