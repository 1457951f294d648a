"""Workspace lifecycle endpoints"""

from fastapi import APIRouter, Depends, Request, Response
import logging

from bannerforge_api.api.deps import get_registry, get_workspace, respond, workspace_id_from
from bannerforge_api.core.config import settings
from bannerforge_api.core.workspace import Workspace, WorkspaceRegistry
from bannerforge_api.models.schemas import MountRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/workspace")
async def mount_workspace(
    request: MountRequest,
    http_request: Request,
    response: Response,
    workspaces: WorkspaceRegistry = Depends(get_registry),
):
    """
    Mount a workspace for the calling page.

    An already-mounted workspace of the same client is unmounted first.
    The response carries the state after the first auth notification has
    been handled, including the page URL with any consumed share parameter
    removed.
    """
    previous = workspace_id_from(http_request)
    if previous:
        await workspaces.unmount(previous)

    workspace = await workspaces.mount(request.page_url)
    await workspace.session.settle()

    response.set_cookie(
        settings.workspace_cookie,
        workspace.workspace_id,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )
    logger.info(f"[Workspace API] Mounted {workspace.workspace_id}")
    return respond(workspace, workspace.state())


@router.get("/workspace")
async def get_workspace_state(workspace: Workspace = Depends(get_workspace)):
    return respond(workspace, workspace.state())


@router.delete("/workspace")
async def unmount_workspace(
    response: Response,
    workspace: Workspace = Depends(get_workspace),
    workspaces: WorkspaceRegistry = Depends(get_registry),
):
    await workspaces.unmount(workspace.workspace_id)
    response.delete_cookie(settings.workspace_cookie)
    return {"status": "unmounted", "workspaceId": workspace.workspace_id}
