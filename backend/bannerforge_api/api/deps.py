"""Shared request dependencies"""

from typing import Any, Dict, Optional

from fastapi import Depends, Request

from bannerforge_api.core.config import settings
from bannerforge_api.core.workspace import Workspace, WorkspaceRegistry, registry
from bannerforge_api.models.errors import ApplicationError, ErrorCode

WORKSPACE_HEADER = "X-Workspace-Id"


def get_registry() -> WorkspaceRegistry:
    return registry


def workspace_id_from(request: Request) -> Optional[str]:
    """Workspace id from the cookie, or the header for non-browser clients"""
    return request.cookies.get(settings.workspace_cookie) or request.headers.get(WORKSPACE_HEADER)


async def get_workspace(request: Request, workspaces: WorkspaceRegistry = Depends(get_registry)) -> Workspace:
    workspace = workspaces.get(workspace_id_from(request))
    if workspace is None:
        raise ApplicationError(
            code=ErrorCode.NOT_FOUND,
            message="Workspace not mounted",
            hint="POST /api/workspace first",
        )
    # Lets the error handler drain this workspace's notifications
    request.state.workspace = workspace
    return workspace


def respond(workspace: Workspace, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Attach (and drain) pending notifications to a response body"""
    payload["notifications"] = [n.model_dump() for n in workspace.notifications.drain()]
    return payload
