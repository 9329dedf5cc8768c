from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ..api.deps import get_workspace, http_error
from ..core.errors import ToneError
from ..models.schemas import ItemCreate, LogFormView, SearchView
from ..services.workspace import Workspace

router = APIRouter(prefix="/items", tags=["Items"])


# PUBLIC_INTERFACE
@router.get(
    "/search",
    response_model=SearchView,
    summary="Search items by title",
    description="Case-insensitive substring match on titles, at most 10 results. A blank query does nothing.",
)
def search(
    q: str = Query(default="", description="Free-text title query"),
    workspace: Workspace = Depends(get_workspace),
) -> SearchView:
    try:
        return workspace.run_search(q)
    except ToneError as exc:
        raise http_error(exc)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=LogFormView,
    status_code=201,
    summary="Create an item",
    description="Creates a catalog entry after a search (title defaults to the query) and opens its log form.",
)
def create_item(
    payload: Optional[ItemCreate] = Body(default=None),
    workspace: Workspace = Depends(get_workspace),
) -> LogFormView:
    try:
        return workspace.create_item_from_search(payload.title if payload else None)
    except ToneError as exc:
        raise http_error(exc)


# PUBLIC_INTERFACE
@router.post(
    "/{item_id}/select",
    response_model=LogFormView,
    summary="Pick a search result",
    description="Opens the log form for one of the current search results.",
)
def select_item(item_id: str, workspace: Workspace = Depends(get_workspace)) -> LogFormView:
    try:
        return workspace.select_search_result(item_id)
    except ToneError as exc:
        raise http_error(exc)
