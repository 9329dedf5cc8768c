"""Unauthenticated read path behind /u/{username}."""

from ..core.errors import NotFound, RemoteError
from ..core.logger import get_logger
from ..models.schemas import PublicProfileView
from .flows import LogListState
from .logs import list_public_logs
from .profiles import find_profile_by_username
from .remote import RemoteService

_logger = get_logger(__name__)


# PUBLIC_INTERFACE
def load_public_profile(remote: RemoteService, username: str) -> PublicProfileView:
    """
    Resolve username to a profile and list that user's public logs.

    Raises NotFound when no profile has the username (a failed lookup is
    reported the same way). A failed log fetch yields an error list state.
    """
    try:
        profile = find_profile_by_username(remote, username)
    except RemoteError as exc:
        _logger.error("Public profile lookup failed", extra={"username": username, "error": exc.detail})
        profile = None
    if profile is None:
        raise NotFound("User not found.")

    state = LogListState()
    state.start()
    try:
        state.resolve(list_public_logs(remote, profile.id))
    except RemoteError as exc:
        state.fail(exc.message)

    return PublicProfileView(
        username=profile.username or "",
        display_name=profile.display_name or profile.username or "",
        avatar_url=profile.avatar_url,
        log_count=len(state.logs),
        log_list=state.view(),
    )
