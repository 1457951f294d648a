"""Shared-content resolution from page-load query parameters"""

from typing import Callable, List, Optional
from urllib.parse import parse_qsl, unquote_plus, urlencode, urlparse, urlunparse
import logging

from bannerforge_api.core.notifications import NotificationLog
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.models.errors import ApplicationError
from bannerforge_api.models.schemas import Session, SharedAiContent, SharedAmazonContent

logger = logging.getLogger(__name__)

AI_CONTENT_PARAM = "sharedAiContentId"
AMAZON_CONTENT_PARAM = "sharedAmazonContentId"


class PageLocation:
    """The visible page URL of one browser context"""

    def __init__(self, url: str):
        self.url = url
        self.history: List[str] = []

    def query_param(self, name: str) -> Optional[str]:
        for key, value in parse_qsl(urlparse(self.url).query, keep_blank_values=True):
            if key == name and value:
                return value
        return None

    def replace_url(self, new_url: str):
        """history.replaceState: change the visible URL without navigating"""
        self.history.append(self.url)
        self.url = new_url

    def without_param(self, name: str) -> str:
        """The current URL minus every ``name`` pair; other pairs keep their exact encoding"""
        parts = urlparse(self.url)
        kept = [pair for pair in parts.query.split("&") if pair and unquote_plus(pair.split("=", 1)[0]) != name]
        return urlunparse(parts._replace(query="&".join(kept)))

    def share_url(self, param: str, doc_id: str, base_url: Optional[str] = None) -> str:
        """<origin><path>?<param>=<id> for the current page (or base_url)"""
        if base_url:
            parts = urlparse(base_url)
        else:
            parts = urlparse(self.url)
        return urlunparse(parts._replace(query=urlencode({param: doc_id}), fragment=""))


class SharedContentResolver:
    """
    One-shot: on the first transition to a signed-in user, loads the shared
    record named in the URL and scrubs the parameter.

    The general-content id wins when both parameters are present; the Amazon
    id is then left untouched.
    """

    def __init__(
        self,
        persistence: PersistenceFacade,
        location: PageLocation,
        notifications: NotificationLog,
        on_ai_content: Optional[Callable[[SharedAiContent], None]] = None,
        on_amazon_content: Optional[Callable[[SharedAmazonContent], None]] = None,
    ):
        self.persistence = persistence
        self.location = location
        self.notifications = notifications
        self.on_ai_content = on_ai_content
        self.on_amazon_content = on_amazon_content
        self.consumed = False
        self.initial_ai_content: Optional[SharedAiContent] = None
        self.initial_amazon_content: Optional[SharedAmazonContent] = None

    async def on_session(self, session: Session):
        if not session.user_id or self.consumed:
            return
        # Marked before the fetch so overlapping transitions cannot fetch twice
        self.consumed = True

        ai_id = self.location.query_param(AI_CONTENT_PARAM)
        amazon_id = self.location.query_param(AMAZON_CONTENT_PARAM)

        if ai_id:
            await self._resolve_ai(ai_id)
        elif amazon_id:
            await self._resolve_amazon(amazon_id)

    async def _resolve_ai(self, doc_id: str):
        try:
            record = await self.persistence.get_shared_ai_content(doc_id)
        except ApplicationError as e:
            logger.error(f"[SharedContent] Error loading shared AI content: {e.message}")
            self.notifications.error("Error", "Could not load the shared content.")
            return
        if record is None:
            logger.warning(f"[SharedContent] Shared AI content ID found in URL, but no document found: {doc_id}")
            return

        logger.info(f"[SharedContent] Loaded shared AI content: {doc_id}")
        self.initial_ai_content = record
        if self.on_ai_content:
            self.on_ai_content(record)
        self.location.replace_url(self.location.without_param(AI_CONTENT_PARAM))
        self.notifications.push("Shared Content Loaded", "AI content has been loaded from the shared link.")

    async def _resolve_amazon(self, doc_id: str):
        try:
            record = await self.persistence.get_shared_amazon_content(doc_id)
        except ApplicationError as e:
            logger.error(f"[SharedContent] Error loading shared Amazon content: {e.message}")
            self.notifications.error("Error", "Could not load the shared content.")
            return
        if record is None:
            logger.warning(f"[SharedContent] Shared Amazon content ID found in URL, but no document found: {doc_id}")
            return

        logger.info(f"[SharedContent] Loaded shared Amazon content: {doc_id}")
        self.initial_amazon_content = record
        if self.on_amazon_content:
            self.on_amazon_content(record)
        self.location.replace_url(self.location.without_param(AMAZON_CONTENT_PARAM))
        self.notifications.push("Shared Content Loaded", "Amazon AI content has been loaded.")
