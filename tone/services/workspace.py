"""
User actions on the home screen.

Each action is a single remote call; a successful mutation re-lists the logs
through the session controller so the home view stays current.
"""

from typing import Any, Optional, Union

from ..core.config import Settings
from ..core.errors import ConfirmationRequired, InvalidInput, NotFound, RemoteError, UsernameTakenError
from ..core.logger import get_logger
from ..models.schemas import (
    HomeView,
    Item,
    Log,
    LogCreate,
    LogFormView,
    LogUpdate,
    Profile,
    ProfileFormView,
    ProfileIn,
    SearchView,
    SignInView,
)
from . import items as items_service
from . import logs as logs_service
from . import profiles as profiles_service
from .flows import DeleteConfirmation, ProfileForm, RequestSequencer, SearchFlow
from .remote import RemoteService
from .session import SessionController

_logger = get_logger(__name__)


# PUBLIC_INTERFACE
class Workspace:
    """Search, log and profile flows for the signed-in user."""

    def __init__(self, remote: RemoteService, session: SessionController, settings: Settings) -> None:
        self._remote = remote
        self._session = session
        self._settings = settings
        self._sequencer = RequestSequencer()
        self.search = SearchFlow()
        self.selected_item: Optional[Item] = None
        self.delete_confirmation = DeleteConfirmation()
        self.profile_form = ProfileForm()
        session.add_reset_hook(self.reset)

    def reset(self) -> None:
        self.search.reset()
        self.selected_item = None
        self.delete_confirmation.close()
        self.profile_form = ProfileForm()

    # -- views --------------------------------------------------------------

    def home_view(self) -> Union[SignInView, HomeView]:
        session = self._session.session
        if session is None:
            return self._session.sign_in_view()
        profile = self._session.profile
        return HomeView(
            user_id=session.user_id,
            email=session.email,
            profile=profile,
            profile_status=self._session.profile_status,
            public_path=f"/u/{profile.username}" if profile and profile.username else None,
            log_list=self._session.log_list.view(),
            selected_item=self.selected_item,
            pending_delete=self.delete_confirmation.pending,
        )

    # -- items --------------------------------------------------------------

    def run_search(self, query: str) -> SearchView:
        self._session.require_user()
        token = self._sequencer.issue("search")
        if not self.search.submit(query, token):
            return self.search.view()
        try:
            results = items_service.search_items(self._remote, query, limit=self._settings.ITEM_SEARCH_LIMIT)
        except RemoteError as exc:
            if self.search.fail(token, exc.message):
                raise
            return self.search.view()
        self.search.resolve(token, results)
        return self.search.view()

    def select_search_result(self, item_id: Any) -> LogFormView:
        self._session.require_user()
        for item in self.search.results:
            if str(item.id) == str(item_id):
                return self.select_item(item)
        raise NotFound("Item is not among the search results.")

    def create_item_from_search(self, title: Optional[str] = None) -> LogFormView:
        """Create a new catalog entry once a search has run, then open its log form."""
        self._session.require_user()
        if not self.search.can_create:
            raise InvalidInput("Search for a title before creating a new item.")
        item = items_service.create_item(
            self._remote,
            title or self.search.query,
            category=self._settings.DEFAULT_ITEM_CATEGORY,
        )
        return self.select_item(item)

    def select_item(self, item: Item) -> LogFormView:
        self.search.reset()
        self.selected_item = item
        return LogFormView(item=item)

    def close_log_form(self) -> None:
        self.selected_item = None

    # -- logs ---------------------------------------------------------------

    def create_log(self, payload: LogCreate) -> Log:
        user_id = self._session.require_user()
        item_id = payload.item_id
        if item_id is None and self.selected_item is not None:
            item_id = self.selected_item.id
        if item_id is None:
            raise InvalidInput("Choose an item to log.")
        log = logs_service.create_log(self._remote, user_id, item_id, payload)
        self.selected_item = None
        self._session.refresh_logs()
        return log

    def update_log(self, log_id: Any, payload: LogUpdate) -> Log:
        self._session.require_user()
        log = logs_service.update_log(self._remote, log_id, payload)
        self._session.refresh_logs()
        return log

    def request_delete(self, log_id: Any) -> None:
        self._session.require_user()
        self.delete_confirmation.open(log_id)

    def cancel_delete(self) -> None:
        self.delete_confirmation.close()

    def confirm_delete(self, log_id: Any) -> None:
        self._session.require_user()
        if not self.delete_confirmation.is_confirming(log_id):
            raise ConfirmationRequired("Confirm the delete before removing this log.")
        logs_service.delete_log(self._remote, log_id)
        self.delete_confirmation.close()
        self._session.refresh_logs()

    # -- profile ------------------------------------------------------------

    def open_profile_form(self) -> ProfileFormView:
        user_id = self._session.require_user()
        form = ProfileForm()
        self.profile_form = form
        try:
            form.loaded(profiles_service.get_profile(self._remote, user_id))
        except RemoteError as exc:
            _logger.error("Profile form load failed", extra={"user_id": user_id, "error": exc.detail})
            form.load_failed("Could not load your profile.")
        return form.view()

    def profile_form_view(self) -> ProfileFormView:
        return self.profile_form.view()

    def _current_avatar_url(self) -> Optional[str]:
        # The form only knows the stored avatar once it has been opened.
        url = self.profile_form.effective_avatar_url()
        if url is None and self._session.profile is not None:
            url = self._session.profile.avatar_url
        return url

    def save_profile(self, payload: ProfileIn) -> Profile:
        user_id = self._session.require_user()
        form = self.profile_form
        form.save_started(payload.username, payload.display_name)
        data = ProfileIn(
            username=payload.username,
            display_name=payload.display_name,
            avatar_url=payload.avatar_url or self._current_avatar_url(),
        )
        try:
            profile = profiles_service.upsert_profile(self._remote, user_id, data)
        except InvalidInput as exc:
            form.rejected(exc.message)
            raise
        except (UsernameTakenError, RemoteError) as exc:
            form.save_failed(exc.message)
            raise
        form.saved(profile)
        self._session.refresh_profile()
        return profile

    def upload_avatar(self, data: bytes, content_type: Optional[str], filename: Optional[str] = None) -> str:
        user_id = self._session.require_user()
        form = self.profile_form
        form.upload_started()
        try:
            url = profiles_service.upload_avatar(
                self._remote,
                user_id,
                data,
                content_type,
                filename=filename,
                bucket=self._settings.AVATAR_BUCKET,
                max_bytes=self._settings.AVATAR_MAX_BYTES,
            )
        except (InvalidInput, RemoteError) as exc:
            form.upload_failed(exc.message)
            raise
        form.upload_finished(url)
        return url
