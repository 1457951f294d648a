"""Live list of the signed-in user's saved banners"""

from typing import Callable, List, Optional, Set
import asyncio
import logging

from bannerforge_api.core.notifications import NotificationLog
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.models.schemas import SavedBanner, Session

logger = logging.getLogger(__name__)


class SavedBannersState:
    """
    Holds the banner list delivered by the persistence subscription.

    The subscription is bound to one user id: it is torn down and reopened
    whenever the session identity changes, and torn down on sign-out and on
    close. Stream consumers (SSE) receive every new list through a queue.
    """

    def __init__(self, persistence: PersistenceFacade, notifications: NotificationLog):
        self.persistence = persistence
        self.notifications = notifications
        self.banners: List[SavedBanner] = []
        self.loading = True
        self.user_id: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        # Bumped on every teardown; callbacks from an older subscription are ignored
        self._generation = 0
        self._queues: Set[asyncio.Queue] = set()

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    async def on_session(self, session: Session):
        if self.subscribed and session.user_id == self.user_id:
            return
        self._teardown()
        self.user_id = session.user_id
        self.loading = True
        generation = self._generation

        def on_data(banners: List[SavedBanner]):
            if generation != self._generation:
                logger.info("[SavedBanners] Dropping banners from a closed subscription")
                return
            self._on_data(banners)

        def on_error(error: Exception):
            if generation == self._generation:
                self._on_error(error)

        if session.user_id:
            logger.info(f"[SavedBanners] Subscribing to banners of {session.user_id}")
            self._unsubscribe = self.persistence.list_banners(session.user_id, on_data, on_error)
        else:
            # Signed out: the facade delivers an empty list, nothing stays subscribed
            self.persistence.list_banners(None, on_data, on_error)

    def _on_data(self, banners: List[SavedBanner]):
        self.banners = banners
        self.loading = False
        for queue in list(self._queues):
            queue.put_nowait(banners)

    def _on_error(self, error: Exception):
        logger.error(f"[SavedBanners] Error loading saved banners: {error}")
        self.notifications.error("Error Loading Banners", "Could not fetch your saved banners. Please try again later.")
        self.loading = False

    def find(self, banner_id: str) -> Optional[SavedBanner]:
        for banner in self.banners:
            if banner.id == banner_id:
                return banner
        return None

    # ------------------------------------------------------------------
    # Stream consumers
    # ------------------------------------------------------------------

    def open_stream(self) -> asyncio.Queue:
        """Queue receiving the current list now and every later list; None ends the stream"""
        queue: asyncio.Queue = asyncio.Queue()
        queue.put_nowait(self.banners)
        self._queues.add(queue)
        return queue

    def close_stream(self, queue: asyncio.Queue):
        self._queues.discard(queue)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _teardown(self):
        self._generation += 1
        if self._unsubscribe is not None:
            logger.info(f"[SavedBanners] Unsubscribing from banners of {self.user_id}")
            self._unsubscribe()
            self._unsubscribe = None
        self.banners = []

    def close(self):
        self._teardown()
        for queue in list(self._queues):
            queue.put_nowait(None)
        self._queues.clear()
