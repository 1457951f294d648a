"""GET/PUT /api/profile/social-links"""

from fastapi import APIRouter, Depends

from bannerforge_api.api.deps import get_workspace, respond
from bannerforge_api.core.workspace import Workspace
from bannerforge_api.models.schemas import SocialLinks

router = APIRouter()


@router.get("/profile/social-links")
async def get_social_links(workspace: Workspace = Depends(get_workspace)):
    links = await workspace.get_social_links()
    return respond(workspace, {"socialLinks": links.to_wire()})


@router.put("/profile/social-links")
async def update_social_links(links: SocialLinks, workspace: Workspace = Depends(get_workspace)):
    saved = await workspace.update_social_links(links)
    return respond(workspace, {"socialLinks": saved.to_wire()})
