from typing import Optional
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..api.deps import get_app_settings
from ..core.config import Settings
from ..core.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/debug", tags=["Health"])


def _redact_url(url: Optional[str]) -> Optional[str]:
    """Keep scheme and host only; drop credentials, path and query."""
    if not url:
        return None
    parts = urlsplit(url)
    if not parts.scheme or not parts.hostname:
        return "<unparseable>"
    port = f":{parts.port}" if parts.port else ""
    return f"{parts.scheme}://{parts.hostname}{port}"


class ConfigDebug(BaseModel):
    """Effective configuration (redacted) for diagnostics."""
    env: str = Field(..., description="APP_ENV value")
    supabase_url: Optional[str] = Field(None, description="Supabase origin, redacted")
    anon_key_set: bool = Field(..., description="Whether SUPABASE_ANON_KEY is present")
    auth_redirect_url: str = Field(..., description="Where magic links send the user back to")
    avatar_bucket: str = Field(..., description="Storage bucket for avatars")
    avatar_max_bytes: int = Field(..., description="Upload size limit")


# PUBLIC_INTERFACE
@router.get(
    "/config",
    response_model=ConfigDebug,
    summary="Effective configuration (redacted)",
    description="Shows which Supabase project and redirect target are in use without exposing secrets.",
)
def debug_config(settings: Settings = Depends(get_app_settings)) -> ConfigDebug:
    payload = ConfigDebug(
        env=settings.APP_ENV,
        supabase_url=_redact_url(settings.SUPABASE_URL),
        anon_key_set=bool((settings.SUPABASE_ANON_KEY or "").strip()),
        auth_redirect_url=settings.auth_redirect_url(),
        avatar_bucket=settings.AVATAR_BUCKET,
        avatar_max_bytes=settings.AVATAR_MAX_BYTES,
    )
    logger.info("Debug config requested", extra={"config": payload.model_dump()})
    return payload
