"""Admin status from the per-user profile document"""

import logging

from bannerforge_api.core.notifications import NotificationLog
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.models.errors import ApplicationError
from bannerforge_api.models.schemas import Session

logger = logging.getLogger(__name__)


class ProfileResolver:
    """
    Resolves ``is_admin`` for the current session.

    A missing document, a missing field, or any value other than boolean
    True all mean "not admin". Results of a fetch that was overtaken by a
    later transition are dropped.
    """

    def __init__(self, persistence: PersistenceFacade, notifications: NotificationLog):
        self.persistence = persistence
        self.notifications = notifications
        self.is_admin = False
        self.profile_loading = False
        self._generation = 0

    async def on_session(self, session: Session):
        self._generation += 1
        generation = self._generation

        if not session.user_id:
            self.is_admin = False
            self.profile_loading = False
            return

        self.profile_loading = True
        is_admin = False
        try:
            profile = await self.persistence.get_profile(session.user_id)
            is_admin = profile is not None and profile.get("isAdmin") is True
            if profile is None:
                logger.info(f"[ProfileResolver] No profile document for {session.user_id}")
        except ApplicationError as e:
            logger.error(f"[ProfileResolver] Error fetching profile: {e.message}")
            self.notifications.error("Profile Error", "Could not verify admin status.")
        finally:
            if generation == self._generation:
                self.is_admin = is_admin
                self.profile_loading = False
