"""
Pydantic schemas for rows read from the remote store, request payloads, and the
view models returned by the API.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Stamps
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
class Stamp(str, Enum):
    """The six fixed reaction tags a log can carry."""
    FIRE = "fire"
    CRY = "cry"
    LOVE = "love"
    THINK = "think"
    SLEEP = "sleep"
    VOMIT = "vomit"


STAMP_ICONS: Dict[str, str] = {
    Stamp.FIRE.value: "🔥",
    Stamp.CRY.value: "😭",
    Stamp.LOVE.value: "🥰",
    Stamp.THINK.value: "🤔",
    Stamp.SLEEP.value: "😴",
    Stamp.VOMIT.value: "🤮",
}

STAMP_LABELS: Dict[str, str] = {
    Stamp.FIRE.value: "Best",
    Stamp.CRY.value: "Cried",
    Stamp.LOVE.value: "Precious",
    Stamp.THINK.value: "Thought-provoking",
    Stamp.SLEEP.value: "Dozed off",
    Stamp.VOMIT.value: "Meh",
}

UNKNOWN_STAMP_ICON = "❓"
UNKNOWN_TITLE = "Unknown title"
NO_CATEGORY = "No category"


def stamp_icon(stamp: Optional[str]) -> str:
    return STAMP_ICONS.get(stamp or "", UNKNOWN_STAMP_ICON)


# ---------------------------------------------------------------------------
# Common/Utility Schemas
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
class HealthResponse(BaseModel):
    """Basic health response schema."""
    status: str = Field(..., description="Health status message, e.g., 'ok'")


# PUBLIC_INTERFACE
class MessageResponse(BaseModel):
    message: str = Field(..., description="Human readable outcome")


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
class AuthSession(BaseModel):
    """The authenticated identity as seen by this client."""
    user_id: str = Field(..., description="Auth user identifier")
    email: Optional[str] = Field(default=None, description="Email the magic link was sent to")
    access_token: str = Field(..., description="Bearer token used for store requests")
    expires_at: Optional[int] = Field(default=None, description="Token expiry (epoch seconds)")


# PUBLIC_INTERFACE
class Item(BaseModel):
    """A catalog entry that logs point at."""
    id: Any = Field(..., description="Item identifier")
    title: str = Field(..., description="Title of the media item")
    category: Optional[str] = Field(default=None, description="Free-form category")

    model_config = ConfigDict(extra="ignore")


# PUBLIC_INTERFACE
class Log(BaseModel):
    """One reaction record, optionally joined with its item."""
    id: Any = Field(..., description="Log identifier")
    user_id: str = Field(..., description="Owner of the log")
    item_id: Any = Field(..., description="Referenced item")
    stamp: str = Field(..., description="Stamp value")
    memo: Optional[str] = Field(default=None, description="Optional free text")
    is_public: bool = Field(default=True, description="Visible on the public profile page")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    item: Optional[Item] = Field(default=None, alias="items", description="Joined item row")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_card(self) -> "LogCard":
        return LogCard(
            id=self.id,
            item_id=self.item_id,
            title=self.item.title if self.item and self.item.title else UNKNOWN_TITLE,
            category=self.item.category if self.item and self.item.category else NO_CATEGORY,
            stamp=self.stamp,
            stamp_icon=stamp_icon(self.stamp),
            stamp_label=STAMP_LABELS.get(self.stamp),
            memo=self.memo,
            is_public=self.is_public,
            created_at=self.created_at,
        )


# PUBLIC_INTERFACE
class Profile(BaseModel):
    """A user's public identity."""
    id: str = Field(..., description="Equals the auth user id")
    username: Optional[str] = Field(default=None, description="Unique lower-case handle")
    display_name: Optional[str] = Field(default=None, description="Name shown on the public page")
    avatar_url: Optional[str] = Field(default=None, description="Public URL of the avatar image")
    updated_at: Optional[datetime] = Field(default=None, description="Last write time")

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
class SignInRequest(BaseModel):
    email: str = Field(..., description="Address the magic link is sent to")


# PUBLIC_INTERFACE
class ItemCreate(BaseModel):
    """Create-on-miss payload; title defaults to the last search query."""
    title: Optional[str] = Field(default=None, description="Title of the new item")


# PUBLIC_INTERFACE
class LogCreate(BaseModel):
    item_id: Optional[Any] = Field(default=None, description="Item to log; defaults to the selected item")
    stamp: Stamp = Field(default=Stamp.FIRE, description="Reaction stamp")
    memo: Optional[str] = Field(default=None, description="Optional free text")
    is_public: bool = Field(default=True, description="Show on the public profile page")

    model_config = ConfigDict(
        json_schema_extra={"example": {"item_id": 1, "stamp": "fire", "memo": "great", "is_public": True}}
    )


# PUBLIC_INTERFACE
class LogUpdate(BaseModel):
    stamp: Stamp = Field(..., description="Reaction stamp")
    memo: Optional[str] = Field(default=None, description="Optional free text")
    is_public: bool = Field(..., description="Show on the public profile page")


# PUBLIC_INTERFACE
class ProfileIn(BaseModel):
    """Profile form payload. avatar_url defaults to the pending upload, if any."""
    username: str = Field(default="", description="Requested username")
    display_name: Optional[str] = Field(default=None, description="Optional display name")
    avatar_url: Optional[str] = Field(default=None, description="Avatar URL to store")


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

# PUBLIC_INTERFACE
class LogCard(BaseModel):
    """A log as rendered in a list."""
    id: Any
    item_id: Any
    title: str
    category: str
    stamp: str
    stamp_icon: str
    stamp_label: Optional[str] = None
    memo: Optional[str] = None
    is_public: bool
    created_at: Optional[datetime] = None


# PUBLIC_INTERFACE
class LogListView(BaseModel):
    status: Literal["idle", "loading", "loaded", "error"]
    error: Optional[str] = None
    logs: List[LogCard] = Field(default_factory=list)


# PUBLIC_INTERFACE
class SignInView(BaseModel):
    view: Literal["sign_in"] = "sign_in"
    status: Literal["idle", "sent", "error"] = "idle"
    message: Optional[str] = None


# PUBLIC_INTERFACE
class HomeView(BaseModel):
    view: Literal["home"] = "home"
    user_id: str
    email: Optional[str] = None
    profile: Optional[Profile] = None
    profile_status: Literal["idle", "loaded", "error"] = "idle"
    public_path: Optional[str] = Field(default=None, description="Link to the user's public page")
    log_list: LogListView
    selected_item: Optional[Item] = Field(default=None, description="Item whose log form is open")
    pending_delete: Optional[Any] = Field(default=None, description="Log awaiting delete confirmation")


# PUBLIC_INTERFACE
class SearchView(BaseModel):
    status: Literal["idle", "searching", "results", "error"]
    query: str = ""
    results: List[Item] = Field(default_factory=list)
    searched: bool = False
    can_create: bool = False
    error: Optional[str] = None


# PUBLIC_INTERFACE
class LogFormView(BaseModel):
    """Returned when an item is picked; the log form is open for it."""
    view: Literal["log_form"] = "log_form"
    item: Item
    default_stamp: Stamp = Stamp.FIRE
    default_is_public: bool = True


# PUBLIC_INTERFACE
class ProfileFormView(BaseModel):
    status: Literal["loading", "editing", "saving", "error"]
    username: str = ""
    display_name: str = ""
    avatar_url: Optional[str] = None
    pending_avatar_url: Optional[str] = None
    uploading: bool = False
    error: Optional[str] = None
    public_path: Optional[str] = None


# PUBLIC_INTERFACE
class AvatarUploadResponse(BaseModel):
    avatar_url: str = Field(..., description="Public URL held until the profile is saved")


# PUBLIC_INTERFACE
class PublicProfileView(BaseModel):
    """Unauthenticated page for /u/{username}."""
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    log_count: int
    log_list: LogListView
