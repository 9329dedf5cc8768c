from fastapi import APIRouter, Depends

from ..api.deps import get_remote, http_error
from ..core.errors import ToneError
from ..models.schemas import PublicProfileView
from ..services.public_profile import load_public_profile
from ..services.remote import RemoteService

router = APIRouter(tags=["Public"])


# PUBLIC_INTERFACE
@router.get(
    "/u/{username}",
    response_model=PublicProfileView,
    summary="Public profile",
    description="A user's profile and public logs, newest first. No sign-in required.",
    responses={
        200: {"description": "Profile found."},
        404: {"description": "No user has this username."},
    },
)
def public_profile(username: str, remote: RemoteService = Depends(get_remote)) -> PublicProfileView:
    try:
        return load_public_profile(remote, username)
    except ToneError as exc:
        raise http_error(exc)
