"""POST /api/auth/* endpoints"""

from fastapi import APIRouter, Depends

from bannerforge_api.api.deps import get_workspace, respond
from bannerforge_api.core.session_store import AuthResult
from bannerforge_api.core.workspace import Workspace
from bannerforge_api.models.errors import ApplicationError, ErrorCode
from bannerforge_api.models.schemas import CredentialsRequest

router = APIRouter()


async def _finish(workspace: Workspace, result: AuthResult) -> dict:
    # Wait for the session work the auth change dispatched (profile, shared content, banner list)
    await workspace.session.settle()
    if result.error:
        raise ApplicationError(code=ErrorCode.AUTH_FAILED, message=result.error)
    return respond(workspace, workspace.state())


@router.post("/auth/signup")
async def sign_up(request: CredentialsRequest, workspace: Workspace = Depends(get_workspace)):
    result = await workspace.session.sign_up(request.email, request.password)
    return await _finish(workspace, result)


@router.post("/auth/signin")
async def sign_in(request: CredentialsRequest, workspace: Workspace = Depends(get_workspace)):
    result = await workspace.session.sign_in(request.email, request.password)
    return await _finish(workspace, result)


@router.post("/auth/signout")
async def sign_out(workspace: Workspace = Depends(get_workspace)):
    result = await workspace.session.sign_out()
    return await _finish(workspace, result)


@router.post("/auth/prompt")
async def open_prompt(workspace: Workspace = Depends(get_workspace)):
    workspace.session.open_auth_prompt()
    return respond(workspace, {"authPromptOpen": True})


@router.delete("/auth/prompt")
async def close_prompt(workspace: Workspace = Depends(get_workspace)):
    workspace.session.close_auth_prompt()
    return respond(workspace, {"authPromptOpen": False})
