"""
Session controller.

Owns the authenticated identity for the process. On start it reads the session
persisted in the Supabase client and subscribes to session-change events;
every transition into an authenticated state refreshes the user's logs and
profile, every transition out of it clears them.
"""

import threading
from typing import Any, Callable, List, Optional

from ..core.config import Settings
from ..core.errors import InvalidInput, NotAuthenticated, RemoteError
from ..core.logger import get_logger
from ..models.schemas import AuthSession, Profile, SignInView
from .flows import LogListState, RequestSequencer
from .logs import list_logs
from .profiles import get_profile
from .remote import RemoteService

_logger = get_logger(__name__)

SIGN_IN_SENT_MESSAGE = "Check your email for the sign-in link."


# PUBLIC_INTERFACE
class SessionController:
    """Session lifecycle plus the session-scoped data it loads."""

    def __init__(self, remote: RemoteService, settings: Settings) -> None:
        self._remote = remote
        self._settings = settings
        self._sequencer = RequestSequencer()
        self._lock = threading.RLock()
        self._subscription: Any = None
        self._reset_hooks: List[Callable[[], None]] = []

        self.session: Optional[AuthSession] = None
        self.log_list = LogListState()
        self.profile: Optional[Profile] = None
        self.profile_status = "idle"
        self.sign_in_status = "idle"
        self.sign_in_message: Optional[str] = None

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        try:
            session = self._remote.get_session()
        except RemoteError as exc:
            _logger.warning("Could not restore session", extra={"error": exc.detail})
            session = None
        self._subscription = self._remote.on_session_change(self.handle_session_change)
        self._apply("INITIAL_SESSION", session)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def add_reset_hook(self, hook: Callable[[], None]) -> None:
        """Run hook whenever the session ends."""
        self._reset_hooks.append(hook)

    def handle_session_change(self, event: str, session: Optional[AuthSession]) -> None:
        _logger.info(
            "Session changed",
            extra={"event": event, "user_id": session.user_id if session else None},
        )
        self._apply(event, session)

    def _apply(self, event: str, session: Optional[AuthSession]) -> None:
        with self._lock:
            self.session = session
        if session is not None:
            self.refresh()
        else:
            self._clear()

    def _clear(self) -> None:
        with self._lock:
            # Invalidate anything still in flight for the previous user.
            self._sequencer.issue("logs")
            self._sequencer.issue("profile")
            self.log_list.clear()
            self.profile = None
            self.profile_status = "idle"
        for hook in self._reset_hooks:
            hook()

    # -- identity -----------------------------------------------------------

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    def require_user(self) -> str:
        user_id = self.user_id
        if not user_id:
            raise NotAuthenticated()
        return user_id

    # -- data ---------------------------------------------------------------

    def refresh(self) -> None:
        self.refresh_logs()
        self.refresh_profile()

    def refresh_logs(self) -> None:
        user_id = self.require_user()
        token = self._sequencer.issue("logs")
        self.log_list.start()
        try:
            logs = list_logs(self._remote, user_id)
        except RemoteError as exc:
            if self._sequencer.is_latest("logs", token):
                self.log_list.fail(exc.message)
            return
        if self._sequencer.is_latest("logs", token):
            self.log_list.resolve(logs)
        else:
            _logger.debug("Dropped stale log list response", extra={"token": token})

    def refresh_profile(self) -> None:
        user_id = self.require_user()
        token = self._sequencer.issue("profile")
        try:
            profile = get_profile(self._remote, user_id)
        except RemoteError as exc:
            if self._sequencer.is_latest("profile", token):
                _logger.error("Profile fetch failed", extra={"user_id": user_id, "error": exc.detail})
                self.profile_status = "error"
            return
        if self._sequencer.is_latest("profile", token):
            self.profile = profile
            self.profile_status = "loaded"

    # -- sign in / out ------------------------------------------------------

    def request_sign_in(self, email: str) -> SignInView:
        """Ask the provider to email a one-time sign-in link. No retry."""
        email = (email or "").strip()
        if not email:
            raise InvalidInput("Enter your email address.")
        try:
            self._remote.send_magic_link(email, self._settings.auth_redirect_url())
        except RemoteError as exc:
            self.sign_in_status = "error"
            self.sign_in_message = exc.detail
            raise exc.with_message(exc.detail) from exc
        self.sign_in_status = "sent"
        self.sign_in_message = SIGN_IN_SENT_MESSAGE
        return self.sign_in_view()

    def complete_sign_in(self, code: str) -> None:
        if not (code or "").strip():
            raise InvalidInput("The sign-in link is missing its code.")
        session = self._remote.exchange_code(code)
        # The client normally reports SIGNED_IN itself; apply only if it did not.
        if session is not None and self.user_id != session.user_id:
            self._apply("SIGNED_IN", session)
        self.sign_in_status = "idle"
        self.sign_in_message = None

    def sign_out(self) -> None:
        self._remote.sign_out()
        if self.session is not None:
            self._apply("SIGNED_OUT", None)

    def sign_in_view(self) -> SignInView:
        return SignInView(status=self.sign_in_status, message=self.sign_in_message)
