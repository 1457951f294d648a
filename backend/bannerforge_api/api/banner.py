"""Banner editor and saved-banner endpoints"""

from fastapi import APIRouter, Depends, Response
from pydantic.alias_generators import to_camel

from bannerforge_api.api.deps import get_workspace, respond
from bannerforge_api.core.workspace import Workspace
from bannerforge_api.models.schemas import FIELD_RANGES, FieldUpdateRequest

router = APIRouter()


def _banner_payload(workspace: Workspace) -> dict:
    return {
        "banner": workspace.form.config.to_wire(),
        "preview": workspace.form.preview(),
        # Input ranges the editor offers; values outside them are still accepted
        "fieldRanges": {to_camel(name): list(bounds) for name, bounds in FIELD_RANGES.items()},
    }


@router.get("/banner")
async def get_banner(workspace: Workspace = Depends(get_workspace)):
    return respond(workspace, _banner_payload(workspace))


@router.patch("/banner")
async def update_banner_field(request: FieldUpdateRequest, workspace: Workspace = Depends(get_workspace)):
    workspace.form.update_field(request.name, request.value)
    return respond(workspace, _banner_payload(workspace))


@router.post("/banner/preview")
async def generate_preview(workspace: Workspace = Depends(get_workspace)):
    workspace.form.generate_preview()
    return respond(workspace, _banner_payload(workspace))


@router.get("/banner/html")
async def get_banner_html(workspace: Workspace = Depends(get_workspace)) -> Response:
    """Embeddable HTML fragment of the current banner"""
    return Response(
        content=workspace.form.embed_html(),
        media_type="text/html",
        headers={"X-Content-Type-Options": "nosniff"},
    )


@router.post("/banner/image-error")
async def report_image_error(workspace: Workspace = Depends(get_workspace)):
    workspace.form.mark_image_failed()
    return respond(workspace, _banner_payload(workspace))


# ============================================================================
# Saved banners
# ============================================================================

@router.post("/banners", status_code=201)
async def save_banner(workspace: Workspace = Depends(get_workspace)):
    banner_id = await workspace.save_banner()
    return respond(workspace, {"id": banner_id})


@router.get("/banners")
async def list_banners(workspace: Workspace = Depends(get_workspace)):
    return respond(workspace, {
        "banners": [b.to_wire() for b in workspace.saved.banners],
        "loading": workspace.saved.loading,
    })


@router.post("/banners/{banner_id}/load")
async def load_banner(banner_id: str, workspace: Workspace = Depends(get_workspace)):
    workspace.load_banner(banner_id)
    return respond(workspace, _banner_payload(workspace))


@router.delete("/banners/{banner_id}")
async def delete_banner(banner_id: str, workspace: Workspace = Depends(get_workspace)):
    await workspace.delete_banner(banner_id)
    return respond(workspace, {"id": banner_id, "deleted": True})
