"""
Explicit view-state for each interactive flow.

Each class is a small finite-state value changed only through its event
methods, so it can be driven and inspected without any rendering. Responses
that arrive for a superseded request are dropped using RequestSequencer tokens.
"""

import threading
from typing import Any, Dict, List, Optional

from ..models.schemas import Item, Log, LogListView, ProfileFormView, Profile, SearchView


# PUBLIC_INTERFACE
class RequestSequencer:
    """Monotonic request tokens per slot ("logs", "search", ...)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: Dict[str, int] = {}

    def issue(self, slot: str) -> int:
        with self._lock:
            token = self._latest.get(slot, 0) + 1
            self._latest[slot] = token
            return token

    def is_latest(self, slot: str, token: int) -> bool:
        with self._lock:
            return self._latest.get(slot) == token


# PUBLIC_INTERFACE
class LogListState:
    """idle -> loading -> loaded | error"""

    def __init__(self) -> None:
        self.status = "idle"
        self.logs: List[Log] = []
        self.error: Optional[str] = None

    def start(self) -> None:
        self.status = "loading"

    def resolve(self, logs: List[Log]) -> None:
        self.status = "loaded"
        self.logs = list(logs)
        self.error = None

    def fail(self, message: str) -> None:
        # An empty list alone would read as "no records"; keep the error visible.
        self.status = "error"
        self.logs = []
        self.error = message

    def clear(self) -> None:
        self.__init__()

    def view(self) -> LogListView:
        return LogListView(status=self.status, error=self.error, logs=[log.to_card() for log in self.logs])


# PUBLIC_INTERFACE
class SearchFlow:
    """
    idle -> searching -> results | error

    ``searched`` records that a search ran at least once; it is independent of
    the result count so creating a new item stays possible when matches exist.
    """

    def __init__(self) -> None:
        self.status = "idle"
        self.query = ""
        self.results: List[Item] = []
        self.searched = False
        self.error: Optional[str] = None
        self.token = 0

    def submit(self, query: str, token: int) -> bool:
        """Begin a search. Returns False (and changes nothing) for a blank query."""
        if not (query or "").strip():
            return False
        self.status = "searching"
        self.query = query
        self.searched = True
        self.error = None
        self.token = token
        return True

    def resolve(self, token: int, results: List[Item]) -> bool:
        if token != self.token:
            return False
        self.status = "results"
        self.results = list(results)
        return True

    def fail(self, token: int, message: str) -> bool:
        if token != self.token:
            return False
        self.status = "error"
        self.error = message
        return True

    @property
    def can_create(self) -> bool:
        return self.searched and bool(self.query.strip())

    def reset(self) -> None:
        self.__init__()

    def view(self) -> SearchView:
        return SearchView(
            status=self.status,
            query=self.query,
            results=self.results,
            searched=self.searched,
            can_create=self.can_create,
            error=self.error,
        )


# PUBLIC_INTERFACE
class ProfileForm:
    """loading -> editing -> saving -> editing | error"""

    def __init__(self) -> None:
        self.status = "loading"
        self.username = ""
        self.display_name = ""
        self.avatar_url: Optional[str] = None
        self.pending_avatar_url: Optional[str] = None
        self.uploading = False
        self.error: Optional[str] = None

    def loaded(self, profile: Optional[Profile]) -> None:
        self.status = "editing"
        self.error = None
        self.username = (profile.username if profile else None) or ""
        self.display_name = (profile.display_name if profile else None) or ""
        self.avatar_url = profile.avatar_url if profile else None

    def load_failed(self, message: str) -> None:
        self.status = "error"
        self.error = message

    def save_started(self, username: str, display_name: Optional[str]) -> None:
        self.status = "saving"
        self.error = None
        self.username = username
        self.display_name = display_name or ""

    def save_failed(self, message: str) -> None:
        self.status = "error"
        self.error = message

    def saved(self, profile: Profile) -> None:
        self.pending_avatar_url = None
        self.loaded(profile)

    def rejected(self, message: str) -> None:
        """Local validation failure; the form stays editable."""
        self.status = "error"
        self.error = message

    def upload_started(self) -> None:
        self.uploading = True
        self.error = None

    def upload_finished(self, url: str) -> None:
        self.uploading = False
        self.pending_avatar_url = url

    def upload_failed(self, message: str) -> None:
        self.uploading = False
        self.error = message

    def effective_avatar_url(self) -> Optional[str]:
        return self.pending_avatar_url or self.avatar_url

    def view(self) -> ProfileFormView:
        username = self.username.lower()
        return ProfileFormView(
            status=self.status,
            username=self.username,
            display_name=self.display_name,
            avatar_url=self.avatar_url,
            pending_avatar_url=self.pending_avatar_url,
            uploading=self.uploading,
            error=self.error,
            public_path=f"/u/{username}" if username else None,
        )


# PUBLIC_INTERFACE
class DeleteConfirmation:
    """closed <-> confirming(log_id)"""

    def __init__(self) -> None:
        self.pending: Optional[Any] = None

    def open(self, log_id: Any) -> None:
        self.pending = log_id

    def is_confirming(self, log_id: Any) -> bool:
        return self.pending is not None and str(self.pending) == str(log_id)

    def close(self) -> None:
        self.pending = None
