"""
FastAPI dependencies resolving the handles created by create_app(), and the
mapping from application errors to HTTP responses.
"""

from fastapi import HTTPException, Request

from ..core.config import Settings
from ..core.errors import (
    ConfirmationRequired,
    InvalidInput,
    NotAuthenticated,
    NotFound,
    RemoteError,
    ToneError,
    UsernameTakenError,
)
from ..services.remote import RemoteService
from ..services.session import SessionController
from ..services.workspace import Workspace

_STATUS = (
    (InvalidInput, 400),
    (NotAuthenticated, 401),
    (NotFound, 404),
    (UsernameTakenError, 409),
    (ConfirmationRequired, 409),
    (RemoteError, 502),
)


# PUBLIC_INTERFACE
def http_error(exc: ToneError) -> HTTPException:
    """Translate an application error into an HTTPException with its user message."""
    for kind, status in _STATUS:
        if isinstance(exc, kind):
            return HTTPException(status_code=status, detail=exc.message)
    return HTTPException(status_code=500, detail=exc.message)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_remote(request: Request) -> RemoteService:
    return request.app.state.remote


def get_session_controller(request: Request) -> SessionController:
    return request.app.state.session


def get_workspace(request: Request) -> Workspace:
    return request.app.state.workspace
