"""Authentication service adapters

Each workspace (one browser context) owns one auth service instance, which
holds the signed-in user for that context and pushes every change to its
listeners, like the hosted auth SDK does in the browser.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol
import hashlib
import logging
import uuid

import httpx

from bannerforge_api.models.errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    """Identity delivered by the auth service"""
    uid: str
    email: Optional[str] = None
    is_anonymous: bool = False
    id_token: Optional[str] = None


AuthListener = Callable[[Optional[AuthUser]], None]


class AuthService(Protocol):
    """Consumed interface of the hosted authentication service"""

    current_user: Optional[AuthUser]

    async def sign_up(self, email: str, password: str) -> AuthUser: ...

    async def sign_in(self, email: str, password: str) -> AuthUser: ...

    async def sign_out(self) -> None: ...

    def on_auth_state_changed(self, callback: AuthListener) -> Callable[[], None]: ...


class ObservableAuth:
    """Listener bookkeeping shared by the adapters"""

    def __init__(self):
        self.current_user: Optional[AuthUser] = None
        self._listeners: List[AuthListener] = []

    def on_auth_state_changed(self, callback: AuthListener) -> Callable[[], None]:
        """Subscribe; the callback fires immediately with the current user"""
        self._listeners.append(callback)
        callback(self.current_user)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_user(self, user: Optional[AuthUser]):
        self.current_user = user
        for listener in list(self._listeners):
            listener(user)

    async def sign_out(self) -> None:
        self._set_user(None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


# ============================================================================
# In-memory accounts (development and tests)
# ============================================================================

class InMemoryAccounts:
    """Account directory shared by every in-memory auth service of the process"""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, str]] = {}

    @staticmethod
    def _hash(password: str) -> str:
        return hashlib.sha256(password.encode("utf-8")).hexdigest()

    def create(self, email: str, password: str) -> str:
        key = email.strip().lower()
        if key in self.accounts:
            raise AuthError("Firebase: Error (auth/email-already-in-use).", code="auth/email-already-in-use")
        if len(password) < 6:
            raise AuthError("Firebase: Password should be at least 6 characters (auth/weak-password).", code="auth/weak-password")
        uid = uuid.uuid4().hex[:28]
        self.accounts[key] = {"uid": uid, "email": email.strip(), "password": self._hash(password)}
        return uid

    def verify(self, email: str, password: str) -> Dict[str, str]:
        account = self.accounts.get(email.strip().lower())
        if not account or account["password"] != self._hash(password):
            raise AuthError("Firebase: Error (auth/invalid-credential).", code="auth/invalid-credential")
        return account


class InMemoryAuthService(ObservableAuth):
    """Email/password auth against an InMemoryAccounts directory"""

    def __init__(self, accounts: InMemoryAccounts):
        super().__init__()
        self.accounts = accounts

    async def sign_up(self, email: str, password: str) -> AuthUser:
        uid = self.accounts.create(email, password)
        user = AuthUser(uid=uid, email=email.strip())
        self._set_user(user)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        account = self.accounts.verify(email, password)
        user = AuthUser(uid=account["uid"], email=account["email"])
        self._set_user(user)
        return user


# ============================================================================
# Hosted auth (Identity Toolkit REST API)
# ============================================================================

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Identity Toolkit error codes -> messages shown to the user
FIREBASE_ERROR_MESSAGES = {
    "EMAIL_EXISTS": "Firebase: Error (auth/email-already-in-use).",
    "EMAIL_NOT_FOUND": "Firebase: Error (auth/user-not-found).",
    "INVALID_PASSWORD": "Firebase: Error (auth/wrong-password).",
    "INVALID_LOGIN_CREDENTIALS": "Firebase: Error (auth/invalid-credential).",
    "INVALID_EMAIL": "Firebase: Error (auth/invalid-email).",
    "USER_DISABLED": "Firebase: Error (auth/user-disabled).",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Firebase: Error (auth/too-many-requests).",
}


class FirebaseAuthService(ObservableAuth):
    """Email/password auth through the Identity Toolkit REST endpoints"""

    def __init__(self, api_key: str, emulator_host: Optional[str] = None, timeout: float = 15.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__()
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        if emulator_host:
            self.base_url = f"http://{emulator_host}/identitytoolkit.googleapis.com/v1"
        else:
            self.base_url = IDENTITY_TOOLKIT_URL

    async def _post(self, endpoint: str, email: str, password: str) -> AuthUser:
        if not self.api_key:
            raise AuthError("Authentication is not configured (missing FIREBASE_API_KEY).")

        payload = {"email": email, "password": password, "returnSecureToken": True}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/accounts:{endpoint}",
                    params={"key": self.api_key},
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"[FirebaseAuth] {endpoint} request failed: {e}")
            raise AuthError("Firebase: Error (auth/network-request-failed).") from e

        if response.status_code != 200:
            try:
                raw = response.json().get("error", {}).get("message", "")
            except ValueError:
                raw = ""
            # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
            code = raw.split(" : ", 1)[0].strip() if raw else f"HTTP_{response.status_code}"
            message = FIREBASE_ERROR_MESSAGES.get(code) or (raw or f"Authentication failed ({response.status_code}).")
            logger.warning(f"[FirebaseAuth] {endpoint} rejected: {code}")
            raise AuthError(message, code=code)

        data = response.json()
        return AuthUser(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data.get("idToken"),
        )

    async def sign_up(self, email: str, password: str) -> AuthUser:
        user = await self._post("signUp", email, password)
        self._set_user(user)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        user = await self._post("signInWithPassword", email, password)
        self._set_user(user)
        return user
