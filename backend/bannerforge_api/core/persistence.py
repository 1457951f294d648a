"""Persistence facade

Thin typed wrappers over the document store, scoped by user identity.
Every user-scoped call requires a user id; none of them touches the store
without one.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union
import logging

from bannerforge_api.core.config import settings
from bannerforge_api.core.document_store import SERVER_TIMESTAMP, DocumentStore, StoredDocument, Unsubscribe
from bannerforge_api.models.errors import ApplicationError, ErrorCode, StoreError
from bannerforge_api.models.schemas import (
    BannerConfig,
    SavedBanner,
    SharedAiContent,
    SharedAmazonContent,
    SocialLinks,
)

logger = logging.getLogger(__name__)

SHARED_AI_COLLECTION = "publicSharedAiContent"
SHARED_AMAZON_COLLECTION = "publicSharedAmazonContent"

SharedRecord = Union[SharedAiContent, SharedAmazonContent]


def _require_user(user_id: Optional[str], action: str):
    if not user_id:
        logger.error(f"[Persistence] {action} called without userId")
        raise ApplicationError(
            code=ErrorCode.AUTH_REQUIRED,
            message=f"User not authenticated for {action}.",
            hint="Log in or register first.",
        )


def _iso(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class PersistenceFacade:
    """Save/list/delete/share operations over a DocumentStore"""

    def __init__(self, store: DocumentStore, tenant_id: Optional[str] = None):
        self.store = store
        self.tenant_id = settings.tenant_id if tenant_id is None else tenant_id

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _path(self, path: str) -> str:
        if self.tenant_id:
            return f"artifacts/{self.tenant_id}/{path}"
        return path

    def user_doc(self, user_id: str) -> str:
        return self._path(f"users/{user_id}")

    def banners_collection(self, user_id: str) -> str:
        return self._path(f"users/{user_id}/banners")

    def shared_collection(self, record: SharedRecord) -> str:
        if isinstance(record, SharedAmazonContent):
            return self._path(SHARED_AMAZON_COLLECTION)
        return self._path(SHARED_AI_COLLECTION)

    async def _call(self, action: str, coro):
        try:
            return await coro
        except StoreError as e:
            logger.error(f"[Persistence] {action} failed: {e}")
            raise ApplicationError(
                code=ErrorCode.DATABASE_ERROR,
                message=str(e) or f"Failed to {action}.",
                retryable=True,
            ) from e

    # ------------------------------------------------------------------
    # Banners
    # ------------------------------------------------------------------

    async def save_banner(self, user_id: Optional[str], config: BannerConfig) -> str:
        """Write a new banner document; returns its id"""
        _require_user(user_id, "saving banner")
        data = {k: v for k, v in config.to_wire(exclude={"id", "created_at"}).items() if v is not None}
        data["createdAt"] = SERVER_TIMESTAMP
        doc_id = await self._call("save banner", self.store.add(self.banners_collection(user_id), data))
        logger.info(f"[Persistence] Banner saved. Doc ID: {doc_id}")
        return doc_id

    def list_banners(
        self,
        user_id: Optional[str],
        on_data: Callable[[List[SavedBanner]], None],
        on_error: Callable[[Exception], None],
    ) -> Unsubscribe:
        """
        Live subscription to the user's banners, newest first.

        Without a user id, delivers an empty list and returns a no-op
        unsubscribe handle instead of erroring.
        """
        if not user_id:
            on_data([])
            return lambda: None

        def handle(docs: List[StoredDocument]):
            banners = []
            for doc in docs:
                data = dict(doc.data)
                data["createdAt"] = _iso(data.get("createdAt"))
                banners.append(SavedBanner.model_validate({**data, "id": doc.id}))
            on_data(banners)

        def handle_error(error: Exception):
            logger.error(f"[Persistence] Error fetching banners: {error}")
            on_error(error)

        return self.store.listen(
            self.banners_collection(user_id),
            order_by="createdAt",
            descending=True,
            on_data=handle,
            on_error=handle_error,
        )

    async def delete_banner(self, user_id: Optional[str], banner_id: str) -> None:
        _require_user(user_id, "deleting banner")
        await self._call("delete banner", self.store.delete(f"{self.banners_collection(user_id)}/{banner_id}"))
        logger.info(f"[Persistence] Banner deleted: {banner_id}")

    # ------------------------------------------------------------------
    # Shared content
    # ------------------------------------------------------------------

    async def share_content(self, user_id: Optional[str], record: SharedRecord) -> str:
        """Write a public shared-content record stamped with sharedBy/sharedAt"""
        _require_user(user_id, "sharing content")
        data = record.to_wire(exclude={"shared_by", "shared_at"}, exclude_none=True)
        data["sharedBy"] = user_id
        data["sharedAt"] = SERVER_TIMESTAMP
        doc_id = await self._call("share content", self.store.add(self.shared_collection(record), data))
        logger.info(f"[Persistence] Content shared to {self.shared_collection(record)}. Doc ID: {doc_id}")
        return doc_id

    async def get_shared_ai_content(self, doc_id: str) -> Optional[SharedAiContent]:
        data = await self._call("load shared content", self.store.get(f"{self._path(SHARED_AI_COLLECTION)}/{doc_id}"))
        if data is None:
            return None
        data["sharedAt"] = _iso(data.get("sharedAt"))
        return SharedAiContent.model_validate(data)

    async def get_shared_amazon_content(self, doc_id: str) -> Optional[SharedAmazonContent]:
        data = await self._call("load shared content", self.store.get(f"{self._path(SHARED_AMAZON_COLLECTION)}/{doc_id}"))
        if data is None:
            return None
        data["sharedAt"] = _iso(data.get("sharedAt"))
        return SharedAmazonContent.model_validate(data)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._call("load profile", self.store.get(self.user_doc(user_id)))

    async def ensure_profile(self, user_id: str, email: Optional[str]) -> bool:
        """Create the profile document if absent; returns True when created"""
        _require_user(user_id, "creating profile")
        existing = await self.get_profile(user_id)
        if existing is not None:
            return False
        await self._call("create profile", self.store.set(self.user_doc(user_id), {
            "email": email,
            "isAdmin": False,
            "createdAt": SERVER_TIMESTAMP,
        }))
        logger.info(f"[Persistence] Profile created for {user_id}")
        return True

    async def get_social_links(self, user_id: Optional[str]) -> Optional[SocialLinks]:
        if not user_id:
            return None
        profile = await self.get_profile(user_id)
        if not profile or not profile.get("socialLinks"):
            return None
        return SocialLinks.model_validate(profile["socialLinks"])

    async def update_social_links(self, user_id: Optional[str], links: SocialLinks) -> SocialLinks:
        """Update only the socialLinks field, dropping empty entries"""
        _require_user(user_id, "updating social links")
        cleaned = {
            k: v.strip() for k, v in links.to_wire().items()
            if isinstance(v, str) and v.strip()
        }
        # update (not set) so isAdmin/email/createdAt stay untouched
        await self._call("update social links", self.store.update(self.user_doc(user_id), {"socialLinks": cleaned}))
        return SocialLinks.model_validate(cleaned)
