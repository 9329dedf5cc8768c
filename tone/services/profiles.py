"""
Profile reads and writes, username rules, and avatar uploads.
"""

import mimetypes
import re
from datetime import datetime, timezone
from typing import Optional

from ..core.errors import InvalidInput, RemoteError, UsernameTakenError
from ..core.logger import get_logger
from ..models.schemas import Profile, ProfileIn
from .remote import Filter, RemoteService

_logger = get_logger(__name__)

PROFILES_TABLE = "profiles"
USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")
EXTENSION_PATTERN = re.compile(r"[a-z0-9]{1,8}")
USERNAME_MIN_LENGTH = 3
UNIQUE_VIOLATION = "23505"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def validate_username(raw: Optional[str]) -> str:
    """Check the username rules and return it lower-cased."""
    username = raw or ""
    if not username.strip():
        raise InvalidInput("Enter a username.")
    if not USERNAME_PATTERN.fullmatch(username):
        raise InvalidInput("Usernames may only contain letters, numbers and underscores.")
    if len(username) < USERNAME_MIN_LENGTH:
        raise InvalidInput(f"Usernames must be at least {USERNAME_MIN_LENGTH} characters.")
    return username.lower()


def _first(remote: RemoteService, column: str, value: str) -> Optional[Profile]:
    rows = remote.select(PROFILES_TABLE, filters=[Filter(column=column, op="eq", value=value)], limit=1)
    return Profile(**rows[0]) if rows else None


# PUBLIC_INTERFACE
def get_profile(remote: RemoteService, user_id: str) -> Optional[Profile]:
    """The profile row for user_id, or None when the user has not created one."""
    return _first(remote, "id", user_id)


# PUBLIC_INTERFACE
def find_profile_by_username(remote: RemoteService, username: str) -> Optional[Profile]:
    return _first(remote, "username", (username or "").strip().lower())


# PUBLIC_INTERFACE
def upsert_profile(remote: RemoteService, user_id: str, payload: ProfileIn) -> Profile:
    """
    Validate and write the profile keyed by user id.

    Raises InvalidInput before any network call, UsernameTakenError when the
    store reports a uniqueness violation, RemoteError for everything else.
    """
    username = validate_username(payload.username)
    row = {
        "id": user_id,
        "username": username,
        "display_name": (payload.display_name or "").strip() or None,
        "avatar_url": payload.avatar_url,
        "updated_at": utc_now().isoformat(),
    }
    try:
        saved = remote.upsert(PROFILES_TABLE, row, on_conflict="id")
    except RemoteError as exc:
        if exc.code == UNIQUE_VIOLATION:
            _logger.info("Username already taken", extra={"username": username})
            raise UsernameTakenError() from exc
        raise exc.with_message("Failed to save the profile.") from exc
    _logger.info("Profile saved", extra={"user_id": user_id, "username": username})
    return Profile(**saved)


# PUBLIC_INTERFACE
def validate_avatar(content_type: Optional[str], size: int, max_bytes: int) -> None:
    """Reject non-images and oversized files without touching the network."""
    if not (content_type or "").lower().startswith("image/"):
        raise InvalidInput("Choose an image file.")
    if size > max_bytes:
        raise InvalidInput(f"Images must be {max_bytes // (1024 * 1024)}MB or smaller.")


def avatar_object_name(user_id: str, content_type: str, filename: Optional[str] = None) -> str:
    """
    ``{user_id}-{epoch millis}.{ext}``; unique per user and upload instant.

    The extension follows the content type. The filename's suffix is used only
    for image types mimetypes does not know, and only if it is plain
    lower-case alphanumerics.
    """
    ext = (mimetypes.guess_extension(content_type) or "").lstrip(".")
    if not ext and filename and "." in filename:
        suffix = filename.rsplit(".", 1)[1].lower()
        if EXTENSION_PATTERN.fullmatch(suffix):
            ext = suffix
    ext = ext or "img"
    millis = int(utc_now().timestamp() * 1000)
    return f"{user_id}-{millis}.{ext}"


# PUBLIC_INTERFACE
def upload_avatar(
    remote: RemoteService,
    user_id: str,
    data: bytes,
    content_type: Optional[str],
    filename: Optional[str] = None,
    bucket: str = "avatars",
    max_bytes: int = 2 * 1024 * 1024,
) -> str:
    """Store an avatar image and return its public URL."""
    validate_avatar(content_type, len(data), max_bytes)
    path = avatar_object_name(user_id, content_type or "", filename)
    try:
        remote.upload(bucket, path, data, content_type or "application/octet-stream", upsert=True)
        url = remote.public_url(bucket, path)
    except RemoteError as exc:
        raise exc.with_message("Failed to upload the avatar.") from exc
    _logger.info("Avatar uploaded", extra={"user_id": user_id, "path": path, "bytes": len(data)})
    return url
