from fastapi import APIRouter, Depends, File, UploadFile

from ..api.deps import get_app_settings, get_workspace, http_error
from ..core.config import Settings
from ..core.errors import ToneError
from ..models.schemas import AvatarUploadResponse, Profile, ProfileFormView, ProfileIn
from ..services.workspace import Workspace

router = APIRouter(prefix="/profile", tags=["Profile"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ProfileFormView,
    summary="Open profile settings",
    description="Loads the signed-in user's profile into the settings form. A missing profile is an empty form.",
)
def open_profile(workspace: Workspace = Depends(get_workspace)) -> ProfileFormView:
    try:
        return workspace.open_profile_form()
    except ToneError as exc:
        raise http_error(exc)


# PUBLIC_INTERFACE
@router.put(
    "",
    response_model=Profile,
    summary="Save profile",
    description="""
Validates and saves username, display name and avatar.

- username: letters, numbers and underscores, at least 3 characters; stored lower-cased
- avatar_url: defaults to the most recent avatar upload when omitted
""",
    responses={
        200: {"description": "Profile saved."},
        400: {"description": "Invalid username."},
        409: {"description": "Username already taken."},
        502: {"description": "Save failed."},
    },
)
def save_profile(payload: ProfileIn, workspace: Workspace = Depends(get_workspace)) -> Profile:
    try:
        return workspace.save_profile(payload)
    except ToneError as exc:
        raise http_error(exc)


# PUBLIC_INTERFACE
@router.post(
    "/avatar",
    response_model=AvatarUploadResponse,
    summary="Upload an avatar image",
    description="Stores an image (2MB max) and holds its URL until the profile is saved.",
    responses={
        400: {"description": "Not an image, or too large."},
        502: {"description": "Upload failed."},
    },
)
def upload_avatar(
    file: UploadFile = File(..., description="Avatar image"),
    workspace: Workspace = Depends(get_workspace),
    settings: Settings = Depends(get_app_settings),
) -> AvatarUploadResponse:
    # One byte past the limit is enough to reject oversized files.
    data = file.file.read(settings.AVATAR_MAX_BYTES + 1)
    try:
        url = workspace.upload_avatar(data, file.content_type, filename=file.filename)
    except ToneError as exc:
        raise http_error(exc)
    return AvatarUploadResponse(avatar_url=url)
