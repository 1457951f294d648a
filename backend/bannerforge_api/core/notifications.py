"""User-visible notification log (toasts)"""

from datetime import datetime, timezone
from typing import List, Optional
import logging

from bannerforge_api.models.schemas import Notification

logger = logging.getLogger(__name__)


class NotificationLog:
    """
    Collects toast notifications for one workspace.

    The HTTP layer drains the log on every response; anything not drained
    stays queued for the next one.
    """

    def __init__(self):
        self.pending: List[Notification] = []
        self.last_updated: Optional[datetime] = None

    def push(self, title: str, description: str, destructive: bool = False):
        """Queue a notification"""
        now = datetime.now(timezone.utc)

        # Skip an identical notification pushed within the last second
        if self.pending and self.last_updated:
            recent = self.pending[-1]
            time_diff = (now - self.last_updated).total_seconds()
            if recent.title == title and recent.description == description and time_diff < 1.0:
                logger.debug(f"Skipping duplicate notification: {title}")
                return

        self.pending.append(Notification(
            ts=now.isoformat(),
            title=title,
            description=description,
            variant="destructive" if destructive else "default",
        ))
        self.last_updated = now

    def error(self, title: str, description: str):
        self.push(title, description, destructive=True)

    def drain(self) -> List[Notification]:
        """Return and clear pending notifications"""
        drained, self.pending = self.pending, []
        return drained

    def latest(self) -> Optional[Notification]:
        if not self.pending:
            return None
        return self.pending[-1]
