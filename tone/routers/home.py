from typing import Union

from fastapi import APIRouter, Depends

from ..api.deps import get_workspace
from ..models.schemas import HomeView, SignInView
from ..services.workspace import Workspace

router = APIRouter(tags=["Home"])


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=Union[HomeView, SignInView],
    summary="Home view",
    description="The signed-in user's profile and logs, or the sign-in view when no session exists.",
)
def home(workspace: Workspace = Depends(get_workspace)) -> Union[HomeView, SignInView]:
    return workspace.home_view()
