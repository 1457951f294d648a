"""Workspace: all client state of one browser context

A workspace is created when the page mounts and torn down when it
unmounts. It wires the session store to the resolvers and the saved-banner
subscription, and exposes the banner operations that need a signed-in user.
"""

from typing import Any, Callable, Dict, List, Optional
import asyncio
import logging
import time
import uuid

from bannerforge_api.agents.content_agents import ContentAgents
from bannerforge_api.core.auth_service import AuthService, FirebaseAuthService, InMemoryAccounts, InMemoryAuthService
from bannerforge_api.core.banner_form import BannerFormState
from bannerforge_api.core.config import settings
from bannerforge_api.core.content_panel import ContentGenerationPanel
from bannerforge_api.core.document_store import DocumentStore, InMemoryDocumentStore
from bannerforge_api.core.notifications import NotificationLog
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.core.profile_resolver import ProfileResolver
from bannerforge_api.core.saved_banners import SavedBannersState
from bannerforge_api.core.session_store import SessionStore
from bannerforge_api.core.shared_content import PageLocation, SharedContentResolver
from bannerforge_api.models.errors import ApplicationError, ErrorCode
from bannerforge_api.models.schemas import SocialLinks

logger = logging.getLogger(__name__)


# ============================================================================
# Backends
# ============================================================================

# Process-wide in-memory backends (shared by every workspace)
memory_accounts = InMemoryAccounts()
memory_store = InMemoryDocumentStore()
_firestore_store: Optional[DocumentStore] = None


def create_auth_service() -> AuthService:
    """One auth service per browser context; it holds that context's user"""
    if settings.auth_backend == "firebase":
        return FirebaseAuthService(
            api_key=settings.firebase_api_key,
            emulator_host=settings.auth_emulator_host or None,
        )
    if settings.auth_backend != "memory":
        raise ApplicationError(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=f"Unknown auth backend: {settings.auth_backend}",
        )
    return InMemoryAuthService(memory_accounts)


def create_document_store() -> DocumentStore:
    global _firestore_store
    if settings.database_backend == "firestore":
        if _firestore_store is None:
            # Imported here so the memory backend runs without GCP credentials
            from bannerforge_api.core.firestore_store import FirestoreDocumentStore
            _firestore_store = FirestoreDocumentStore(
                project_id=settings.firebase_project_id,
                emulator_host=settings.firestore_emulator_host or None,
            )
        return _firestore_store
    if settings.database_backend != "memory":
        raise ApplicationError(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=f"Unknown database backend: {settings.database_backend}",
        )
    return memory_store


# ============================================================================
# Workspace
# ============================================================================

class Workspace:
    """Explicit store object standing in for one mounted app provider"""

    def __init__(
        self,
        workspace_id: str,
        page_url: str,
        auth: AuthService,
        store: DocumentStore,
        agents: Optional[ContentAgents] = None,
        tenant_id: Optional[str] = None,
        share_base_url: Optional[str] = None,
    ):
        self.workspace_id = workspace_id
        self.notifications = NotificationLog()
        self.location = PageLocation(page_url)
        self.persistence = PersistenceFacade(store, tenant_id=tenant_id)
        self.session = SessionStore(auth, self.persistence, self.notifications)
        self.profile = ProfileResolver(self.persistence, self.notifications)
        self.form = BannerFormState()
        self.panel = ContentGenerationPanel(
            agents or ContentAgents(),
            self.session,
            self.persistence,
            self.location,
            self.notifications,
            share_base_url=settings.share_base_url if share_base_url is None else share_base_url,
        )
        self.shared = SharedContentResolver(
            self.persistence,
            self.location,
            self.notifications,
            on_ai_content=self.panel.load_initial_general,
            on_amazon_content=self.panel.load_initial_amazon,
        )
        self.saved = SavedBannersState(self.persistence, self.notifications)

        self.session.add_listener(self.profile.on_session)
        self.session.add_listener(self.shared.on_session)
        self.session.add_listener(self.saved.on_session)
        self.mounted = False

    async def mount(self):
        if self.mounted:
            return
        logger.info(f"[Workspace] Mounting {self.workspace_id} at {self.location.url}")
        self.mounted = True
        await self.session.start()

    async def close(self):
        logger.info(f"[Workspace] Unmounting {self.workspace_id}")
        self.mounted = False
        await self.session.close()
        self.saved.close()

    # ------------------------------------------------------------------
    # Saved banners
    # ------------------------------------------------------------------

    async def save_banner(self) -> str:
        user_id = self.session.require_user("save banners")
        try:
            doc_id = await self.persistence.save_banner(user_id, self.form.config)
        except ApplicationError as e:
            self.notifications.error("Error Saving Banner", e.message or "Failed to save banner.")
            raise
        self.notifications.push("Success", "Banner saved successfully!")
        return doc_id

    async def delete_banner(self, banner_id: str):
        user_id = self.session.require_user("delete banners")
        try:
            await self.persistence.delete_banner(user_id, banner_id)
        except ApplicationError as e:
            self.notifications.error("Error Deleting Banner", e.message or "Failed to delete banner.")
            raise
        self.notifications.push("Success", "Banner deleted successfully!")

    def load_banner(self, banner_id: str):
        saved = self.saved.find(banner_id)
        if saved is None:
            raise ApplicationError(code=ErrorCode.NOT_FOUND, message=f"Saved banner not found: {banner_id}")
        self.form.load_banner(saved)
        self.notifications.push("Banner Loaded", f"Loaded: {saved.description or 'banner'}")
        return self.form.config

    def apply_idea(self, index: int):
        idea = self.panel.get_idea(index)
        self.form.apply_idea(idea)
        self.notifications.push("Idea Applied!", f'Applied "{idea.idea_name}" to banner settings.')
        return self.form.config

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def get_social_links(self) -> SocialLinks:
        user_id = self.session.require_user("manage your social links")
        return await self.persistence.get_social_links(user_id) or SocialLinks()

    async def update_social_links(self, links: SocialLinks) -> SocialLinks:
        user_id = self.session.require_user("manage your social links")
        try:
            saved = await self.persistence.update_social_links(user_id, links)
        except ApplicationError as e:
            self.notifications.error("Error", e.message or "Failed to update social links.")
            raise
        self.notifications.push("Success", "Social links updated!")
        return saved

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def state(self) -> Dict[str, Any]:
        """Snapshot of everything the page renders"""
        return {
            "workspaceId": self.workspace_id,
            "pageUrl": self.location.url,
            "session": self.session.session.to_wire(),
            "loading": self.session.loading,
            "isAdmin": self.profile.is_admin,
            "profileLoading": self.profile.profile_loading,
            "authPromptOpen": self.session.auth_prompt_open,
            "banner": self.form.config.to_wire(),
            "preview": self.form.preview(),
            "savedBanners": [b.to_wire() for b in self.saved.banners],
            "savedBannersLoading": self.saved.loading,
            "content": {
                "general": self.panel.general.to_wire(),
                "amazon": self.panel.amazon.to_wire(),
                "ideas": self.panel.ideas.to_wire(),
            },
        }


# ============================================================================
# Registry
# ============================================================================

class WorkspaceRegistry:
    """
    In-process registry of mounted workspaces, keyed by workspace id.

    Every lookup refreshes the workspace's last access time; workspaces idle
    for longer than ``idle_timeout`` are unmounted by ``evict_idle`` so a
    closed tab does not keep its subscriptions alive.
    """

    def __init__(
        self,
        auth_factory: Callable[[], AuthService] = create_auth_service,
        store_factory: Callable[[], DocumentStore] = create_document_store,
        agents: Optional[ContentAgents] = None,
        idle_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.auth_factory = auth_factory
        self.store_factory = store_factory
        self.agents = agents
        self.idle_timeout = settings.workspace_idle_timeout if idle_timeout is None else idle_timeout
        self.clock = clock
        self.workspaces: Dict[str, Workspace] = {}
        self.last_access: Dict[str, float] = {}

    async def mount(self, page_url: str) -> Workspace:
        workspace = Workspace(
            workspace_id=uuid.uuid4().hex,
            page_url=page_url,
            auth=self.auth_factory(),
            store=self.store_factory(),
            agents=self.agents,
        )
        self.workspaces[workspace.workspace_id] = workspace
        self.last_access[workspace.workspace_id] = self.clock()
        await workspace.mount()
        return workspace

    def get(self, workspace_id: Optional[str]) -> Optional[Workspace]:
        if not workspace_id:
            return None
        workspace = self.workspaces.get(workspace_id)
        if workspace is not None:
            self.last_access[workspace_id] = self.clock()
        return workspace

    async def unmount(self, workspace_id: str) -> bool:
        workspace = self.workspaces.pop(workspace_id, None)
        self.last_access.pop(workspace_id, None)
        if workspace is None:
            return False
        await workspace.close()
        return True

    async def evict_idle(self) -> List[str]:
        """Unmount every workspace idle for longer than the timeout"""
        now = self.clock()
        expired = [wid for wid, seen in self.last_access.items() if now - seen > self.idle_timeout]
        for workspace_id in expired:
            logger.info(f"[Registry] Evicting idle workspace {workspace_id}")
            try:
                await self.unmount(workspace_id)
            except Exception as e:
                logger.error(f"[Registry] Failed to close workspace {workspace_id}: {e}")
        return expired

    async def run_sweeper(self, interval: float):
        """Background loop calling ``evict_idle`` every ``interval`` seconds"""
        logger.info(f"[Registry] Idle sweeper started (timeout {self.idle_timeout:.0f}s, every {interval:.0f}s)")
        while True:
            await asyncio.sleep(interval)
            await self.evict_idle()

    async def close_all(self):
        for workspace_id in list(self.workspaces):
            await self.unmount(workspace_id)


# Global registry instance
registry = WorkspaceRegistry()
