"""
Application configuration module.

Provides strongly-typed settings using Pydantic BaseSettings. Values are loaded
from environment variables and .env (via python-dotenv automatically loaded by
Pydantic). Use get_settings() to obtain a cached Settings instance.

Supabase integration:
- SUPABASE_URL and SUPABASE_ANON_KEY are mandatory for the remote service; their
  absence is reported by require_remote_credentials() and aborts startup.
- See services/remote.py for the client facade built from these values.
"""

from functools import lru_cache
from typing import List, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


# PUBLIC_INTERFACE
class Settings(BaseSettings):
    """Centralized application configuration powered by Pydantic BaseSettings."""

    # App
    APP_NAME: str = Field(default="Tone", description="Application name")
    APP_ENV: str = Field(default="development", description="Execution environment")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level (DEBUG, INFO, WARNING, ERROR)")
    PORT: int = Field(default=3001, description="Port for the FastAPI server")
    CORS_ALLOWED_ORIGINS: str = Field(default="*", description="Comma-separated list of allowed CORS origins or '*'")

    # Supabase
    SUPABASE_URL: Optional[str] = Field(default=None, description="Supabase project URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(default=None, description="Supabase anon (public) API key")

    # Magic link
    SITE_URL: str = Field(default="http://localhost:3001", description="Public origin of this client")
    AUTH_CALLBACK_PATH: str = Field(default="/auth/callback", description="Path the magic link redirects to")

    # Domain tunables
    AVATAR_BUCKET: str = Field(default="avatars", description="Storage bucket holding avatar images")
    AVATAR_MAX_BYTES: int = Field(default=2 * 1024 * 1024, description="Largest accepted avatar upload")
    ITEM_SEARCH_LIMIT: int = Field(default=10, ge=1, description="Max items returned by a title search")
    DEFAULT_ITEM_CATEGORY: str = Field(default="other", description="Category given to items created on demand")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Convenience helpers (non-env)
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS_ALLOWED_ORIGINS into a list. '*' returns ['*'] to indicate permissive mode.
        """
        raw = (self.CORS_ALLOWED_ORIGINS or "").strip()
        if raw == "*" or raw == "":
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]

    def auth_redirect_url(self) -> str:
        """Absolute URL the magic link sends the user back to."""
        return self.SITE_URL.rstrip("/") + "/" + self.AUTH_CALLBACK_PATH.lstrip("/")

    def require_remote_credentials(self) -> Tuple[str, str]:
        """
        Return (url, anon_key), raising ConfigurationError when either is blank.
        """
        url = (self.SUPABASE_URL or "").strip()
        key = (self.SUPABASE_ANON_KEY or "").strip()
        missing = [name for name, value in (("SUPABASE_URL", url), ("SUPABASE_ANON_KEY", key)) if not value]
        if missing:
            raise ConfigurationError(f"Missing Supabase configuration: {', '.join(missing)}")
        return url, key


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
