"""FastAPI application entry point"""

import asyncio
import os
import sys
import logging
from pathlib import Path
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env before settings are read
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)

from bannerforge_api.core.config import settings  # noqa: E402
from bannerforge_api.core.workspace import registry  # noqa: E402
from bannerforge_api.api import auth, banner, banner_events, content, profile, workspace  # noqa: E402
from bannerforge_api.models.errors import ApplicationError  # noqa: E402
from bannerforge_api.models.schemas import ErrorResponse  # noqa: E402

# Configure logging early with force=True to override any existing config
logging.basicConfig(
    level=logging.DEBUG if settings.environment == "development" else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True,
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

# Third-party clients are noisy at DEBUG
logging.getLogger("httpx").setLevel(logging.INFO)
logging.getLogger("openai").setLevel(logging.INFO)

# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
)

# Configure CORS (credentials: the workspace id travels in a cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApplicationError)
async def application_error_handler(request: Request, exc: ApplicationError):
    """Render ApplicationError as ErrorResponse, with the workspace's pending notifications"""
    workspace_state = getattr(request.state, "workspace", None)
    notifications = workspace_state.notifications.drain() if workspace_state else []
    if workspace_state and exc.workspace_id is None:
        exc.workspace_id = workspace_state.workspace_id

    log = logger.warning if exc.http_status < 500 else logger.error
    log(f"[{exc.code.value}] {request.method} {request.url.path}: {exc.message}")

    body = ErrorResponse(**exc.model_dump(), notifications=notifications)
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())


@app.on_event("startup")
async def startup_event():
    """Log startup diagnostic information and start the idle workspace sweeper"""
    logger.info("=" * 60)
    logger.info("BANNERFORGE API STARTING")
    logger.info("=" * 60)
    logger.info(f"PID: {os.getpid()}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Auth backend: {settings.auth_backend} | Database backend: {settings.database_backend}")
    if settings.tenant_id:
        logger.info(f"Tenant partition: artifacts/{settings.tenant_id}/")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set - content generation endpoints will fail")
    logger.info("=" * 60)

    app.state.sweeper = asyncio.create_task(registry.run_sweeper(settings.workspace_sweep_interval))


@app.on_event("shutdown")
async def shutdown_event():
    """Unmount every workspace so no subscription outlives the process"""
    logger.info("Shutting down backend service...")
    sweeper = getattr(app.state, "sweeper", None)
    if sweeper is not None and sweeper.get_loop() is asyncio.get_running_loop():
        sweeper.cancel()
    await registry.close_all()
    logger.info("Backend service shutdown complete")


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "healthy", "version": settings.api_version}


@app.get("/health")
async def health():
    """Health check for monitoring"""
    return {"status": "healthy", "workspaces": len(registry.workspaces)}


# Register API routes
app.include_router(workspace.router, prefix="/api", tags=["workspace"])
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(banner.router, prefix="/api", tags=["banner"])
app.include_router(banner_events.router, prefix="/sse", tags=["banner-events"])
app.include_router(content.router, prefix="/api", tags=["content"])
app.include_router(profile.router, prefix="/api", tags=["profile"])
