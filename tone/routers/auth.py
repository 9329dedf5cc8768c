from fastapi import APIRouter, Depends, Query

from ..api.deps import get_session_controller, http_error
from ..core.errors import ToneError
from ..core.logger import get_logger
from ..models.schemas import MessageResponse, SignInRequest, SignInView
from ..services.session import SessionController

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Auth"])


# PUBLIC_INTERFACE
@router.post(
    "/sign-in",
    response_model=SignInView,
    summary="Send a magic link",
    description="Emails a one-time sign-in link. The provider's error message is returned as is on failure.",
    responses={
        200: {"description": "Link sent; check your email."},
        400: {"description": "Email missing."},
        502: {"description": "The auth provider rejected the request."},
    },
)
def sign_in(payload: SignInRequest, session: SessionController = Depends(get_session_controller)) -> SignInView:
    try:
        return session.request_sign_in(payload.email)
    except ToneError as exc:
        raise http_error(exc)


# PUBLIC_INTERFACE
@router.get(
    "/callback",
    response_model=MessageResponse,
    summary="Complete magic-link sign in",
    description="Target of the emailed link; exchanges the PKCE code for a session.",
)
def callback(
    code: str = Query(default="", description="Authorization code appended by the auth provider"),
    session: SessionController = Depends(get_session_controller),
) -> MessageResponse:
    try:
        session.complete_sign_in(code)
    except ToneError as exc:
        raise http_error(exc)
    return MessageResponse(message="Signed in.")


# PUBLIC_INTERFACE
@router.post("/sign-out", response_model=MessageResponse, summary="Sign out")
def sign_out(session: SessionController = Depends(get_session_controller)) -> MessageResponse:
    try:
        session.sign_out()
    except ToneError as exc:
        raise http_error(exc)
    return MessageResponse(message="Signed out.")
