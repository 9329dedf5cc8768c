from fastapi import APIRouter, Depends

from ..api.deps import get_session_controller, get_workspace, http_error
from ..core.errors import ToneError
from ..models.schemas import Log, LogCreate, LogListView, LogUpdate, MessageResponse
from ..services.session import SessionController
from ..services.workspace import Workspace

router = APIRouter(prefix="/logs", tags=["Logs"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=LogListView,
    summary="List my logs",
    description="Re-fetches the signed-in user's logs, newest first. A failed fetch reports status 'error'.",
)
def list_logs(session: SessionController = Depends(get_session_controller)) -> LogListView:
    try:
        session.refresh_logs()
    except ToneError as exc:
        raise http_error(exc)
    return session.log_list.view()


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Log,
    status_code=201,
    summary="Record a log",
    description="Logs a stamp and optional memo for an item (defaults to the item whose form is open).",
    responses={
        400: {"description": "No item chosen."},
        401: {"description": "Not signed in."},
        502: {"description": "The store rejected the insert."},
    },
)
def create_log(payload: LogCreate, workspace: Workspace = Depends(get_workspace)) -> Log:
    try:
        return workspace.create_log(payload)
    except ToneError as exc:
        raise http_error(exc)


# PUBLIC_INTERFACE
@router.post("/form/close", response_model=MessageResponse, summary="Close the log form")
def close_form(workspace: Workspace = Depends(get_workspace)) -> MessageResponse:
    workspace.close_log_form()
    return MessageResponse(message="Closed.")


# PUBLIC_INTERFACE
@router.patch(
    "/{log_id}",
    response_model=Log,
    summary="Edit a log",
    description="Replaces stamp, memo and visibility. Ownership is enforced by the store.",
)
def update_log(log_id: str, payload: LogUpdate, workspace: Workspace = Depends(get_workspace)) -> Log:
    try:
        return workspace.update_log(log_id, payload)
    except ToneError as exc:
        raise http_error(exc)


# PUBLIC_INTERFACE
@router.post(
    "/{log_id}/delete-request",
    response_model=MessageResponse,
    summary="Ask to delete a log",
    description="Opens the delete confirmation. The log is removed only by a following DELETE.",
)
def request_delete(log_id: str, workspace: Workspace = Depends(get_workspace)) -> MessageResponse:
    try:
        workspace.request_delete(log_id)
    except ToneError as exc:
        raise http_error(exc)
    return MessageResponse(message="Delete this log? This cannot be undone.")


# PUBLIC_INTERFACE
@router.post("/delete-cancel", response_model=MessageResponse, summary="Cancel a pending delete")
def cancel_delete(workspace: Workspace = Depends(get_workspace)) -> MessageResponse:
    workspace.cancel_delete()
    return MessageResponse(message="Cancelled.")


# PUBLIC_INTERFACE
@router.delete(
    "/{log_id}",
    status_code=204,
    summary="Delete a log",
    description="Permanently removes a log whose delete was requested first.",
    responses={409: {"description": "Delete was not confirmed."}},
)
def delete_log(log_id: str, workspace: Workspace = Depends(get_workspace)) -> None:
    try:
        workspace.confirm_delete(log_id)
    except ToneError as exc:
        raise http_error(exc)
    return None
