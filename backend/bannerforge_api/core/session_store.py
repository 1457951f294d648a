"""Session store

Wraps the auth service for one workspace: subscribes to its push
notifications, publishes the current Session, and dispatches the
session-dependent work (profile, shared content, saved banners) as
concurrent tasks on every transition.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Set
import asyncio
import logging

from bannerforge_api.core.auth_service import AuthService, AuthUser
from bannerforge_api.core.notifications import NotificationLog
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.models.errors import ApplicationError, AuthError, ErrorCode
from bannerforge_api.models.schemas import Session

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], Awaitable[None]]


@dataclass
class AuthResult:
    """Outcome of sign-in/sign-up: a user or a user-visible error"""
    user: Optional[AuthUser] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.user is not None


class SessionStore:
    """Holds the single active Session of a workspace"""

    def __init__(self, auth: AuthService, persistence: PersistenceFacade, notifications: NotificationLog):
        self.auth = auth
        self.persistence = persistence
        self.notifications = notifications
        self.session = Session()
        self.loading = True
        self.auth_prompt_open = False
        self._listeners: List[SessionListener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def add_listener(self, listener: SessionListener):
        """Register work triggered on every session transition"""
        self._listeners.append(listener)

    async def start(self):
        """Subscribe to auth notifications; the first one arrives immediately"""
        if self._unsubscribe is not None:
            return
        logger.info("[SessionStore] Subscribing to auth state changes")
        self._unsubscribe = self.auth.on_auth_state_changed(self._handle_auth_change)

    async def close(self):
        """Unsubscribe and cancel in-flight session work"""
        if self._unsubscribe is not None:
            logger.info("[SessionStore] Unsubscribing from auth state changes")
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def settle(self):
        """Wait until the work dispatched by past transitions has finished"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id

    # ------------------------------------------------------------------
    # Auth notifications
    # ------------------------------------------------------------------

    def _handle_auth_change(self, user: Optional[AuthUser]):
        logger.info(f"[SessionStore] Auth state changed. uid={user.uid if user else 'null'}")
        if user:
            self.session = Session(user_id=user.uid, email=user.email, is_anonymous=user.is_anonymous)
        else:
            self.session = Session()

        session = self.session
        loop = asyncio.get_running_loop()
        for listener in self._listeners:
            task = loop.create_task(self._run_listener(listener, session))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        # Downstream work is dispatched, not awaited
        self.loading = False

    async def _run_listener(self, listener: SessionListener, session: Session):
        try:
            await listener(session)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"[SessionStore] Session listener failed: {e}")
            self.notifications.error("Error", "Something went wrong while loading your session.")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> AuthResult:
        try:
            user = await self.auth.sign_up(email, password)
        except AuthError as e:
            logger.warning(f"[SessionStore] Sign up failed: {e}")
            self.notifications.error("Sign Up Failed", str(e))
            return AuthResult(error=str(e))

        # Secondary write: a failure here does not fail the sign-up
        try:
            await self.persistence.ensure_profile(user.uid, user.email)
        except ApplicationError as e:
            logger.warning(f"[SessionStore] Could not create profile for {user.uid}: {e.message}")

        self.auth_prompt_open = False
        self.notifications.push("Account Created", "You are now signed in.")
        return AuthResult(user=user)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            user = await self.auth.sign_in(email, password)
        except AuthError as e:
            logger.warning(f"[SessionStore] Sign in failed: {e}")
            self.notifications.error("Login Failed", str(e))
            return AuthResult(error=str(e))

        self.auth_prompt_open = False
        self.notifications.push("Welcome Back", f"Logged in as {user.email}.")
        return AuthResult(user=user)

    async def sign_out(self) -> AuthResult:
        try:
            await self.auth.sign_out()
        except AuthError as e:
            logger.warning(f"[SessionStore] Sign out failed: {e}")
            self.notifications.error("Sign Out Failed", str(e))
            return AuthResult(error=str(e))
        self.notifications.push("Signed Out", "You have been signed out.")
        return AuthResult()

    def open_auth_prompt(self):
        self.auth_prompt_open = True

    def close_auth_prompt(self):
        self.auth_prompt_open = False

    def require_user(self, action: str) -> str:
        """
        Return the signed-in user id, or block the action.

        Without a user, shows the authentication prompt and raises
        AUTH_REQUIRED before any database call is issued.
        """
        if self.session.user_id:
            return self.session.user_id
        logger.warning(f"[SessionStore] {action} blocked: no signed-in user")
        self.notifications.error("Authentication Required", f"Please log in or register to {action}.")
        self.open_auth_prompt()
        raise ApplicationError(
            code=ErrorCode.AUTH_REQUIRED,
            message=f"Please log in or register to {action}.",
        )
