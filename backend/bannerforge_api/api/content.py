"""POST /api/content/* endpoints (generation, ideas, sharing)"""

from fastapi import APIRouter, Depends

from bannerforge_api.api.deps import get_workspace, respond
from bannerforge_api.core.workspace import Workspace
from bannerforge_api.models.schemas import AmazonContentRequest, BannerIdeasRequest, GeneralContentRequest

router = APIRouter()


@router.post("/content/general")
async def generate_general_content(request: GeneralContentRequest, workspace: Workspace = Depends(get_workspace)):
    state = await workspace.panel.generate_general(request)
    return respond(workspace, {"general": state.to_wire()})


@router.post("/content/general/share")
async def share_general_content(workspace: Workspace = Depends(get_workspace)):
    shared = await workspace.panel.share_general()
    return respond(workspace, shared.to_wire())


@router.post("/content/amazon")
async def generate_amazon_content(request: AmazonContentRequest, workspace: Workspace = Depends(get_workspace)):
    state = await workspace.panel.generate_amazon(request)
    return respond(workspace, {"amazon": state.to_wire()})


@router.post("/content/amazon/image-error")
async def report_amazon_image_error(workspace: Workspace = Depends(get_workspace)):
    state = workspace.panel.mark_amazon_image_failed()
    return respond(workspace, {"amazon": state.to_wire()})


@router.post("/content/amazon/share")
async def share_amazon_content(workspace: Workspace = Depends(get_workspace)):
    shared = await workspace.panel.share_amazon()
    return respond(workspace, shared.to_wire())


@router.post("/content/ideas")
async def generate_banner_ideas(request: BannerIdeasRequest, workspace: Workspace = Depends(get_workspace)):
    state = await workspace.panel.generate_ideas(request.prompt)
    return respond(workspace, {"ideas": state.to_wire()})


@router.post("/content/ideas/{index}/apply")
async def apply_banner_idea(index: int, workspace: Workspace = Depends(get_workspace)):
    config = workspace.apply_idea(index)
    return respond(workspace, {
        "banner": config.to_wire(),
        "preview": workspace.form.preview(),
    })
