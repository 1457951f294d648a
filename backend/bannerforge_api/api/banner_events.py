"""GET /sse/banners endpoint"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
import asyncio
import json
import logging

from bannerforge_api.api.deps import get_workspace
from bannerforge_api.core.workspace import Workspace

logger = logging.getLogger(__name__)

router = APIRouter()

KEEPALIVE_SECONDS = 15.0


@router.get("/banners")
async def stream_saved_banners(workspace: Workspace = Depends(get_workspace)):
    """
    Stream the saved-banner list as Server-Sent Events.

    One event per delivered list (newest first), starting with the current
    one. The stream ends when the workspace is unmounted.
    """
    logger.info(f"SSE ENDPOINT: /sse/banners - stream opened for workspace {workspace.workspace_id}")
    queue = workspace.saved.open_stream()

    async def generate():
        try:
            while True:
                try:
                    banners = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                if banners is None:
                    logger.info(f"SSE: Workspace {workspace.workspace_id} closed, ending stream")
                    break
                payload = [b.to_wire() for b in banners]
                yield f"event: banners\ndata: {json.dumps(payload, ensure_ascii=False)}\n\n"
        finally:
            workspace.saved.close_stream(queue)

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
