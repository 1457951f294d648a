"""Tests for the session store and its listeners"""
import pytest
from unittest.mock import AsyncMock

from bannerforge_api.core.auth_service import InMemoryAuthService
from bannerforge_api.core.session_store import SessionStore
from bannerforge_api.models.errors import ApplicationError, ErrorCode, StoreError


@pytest.fixture
def auth(accounts):
    return InMemoryAuthService(accounts)


@pytest.fixture
def session_store(auth, persistence, notifications):
    return SessionStore(auth, persistence, notifications)


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_publishes_signed_out_session(self, session_store):
        listener = AsyncMock()
        session_store.add_listener(listener)
        assert session_store.loading is True

        await session_store.start()
        await session_store.settle()

        assert session_store.loading is False
        assert session_store.user_id is None
        listener.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_unsubscribes(self, session_store, auth):
        await session_store.start()
        assert auth.listener_count == 1
        await session_store.close()
        assert auth.listener_count == 0

    @pytest.mark.asyncio
    async def test_failing_listener_is_reported(self, session_store, notifications):
        session_store.add_listener(AsyncMock(side_effect=RuntimeError("boom")))
        await session_store.start()
        await session_store.settle()
        assert notifications.latest().variant == "destructive"


class TestOperations:
    @pytest.mark.asyncio
    async def test_sign_up_publishes_user_and_creates_profile(self, session_store, store, notifications):
        seen = []

        async def listener(session):
            seen.append(session.user_id)

        session_store.add_listener(listener)
        await session_store.start()
        session_store.open_auth_prompt()

        result = await session_store.sign_up("new@example.com", "secret123")
        await session_store.settle()

        assert result.ok
        assert session_store.user_id == result.user.uid
        assert session_store.session.email == "new@example.com"
        assert seen == [None, result.user.uid]
        assert session_store.auth_prompt_open is False
        assert store.documents[f"users/{result.user.uid}"]["isAdmin"] is False
        assert notifications.latest().title == "Account Created"

    @pytest.mark.asyncio
    async def test_sign_up_survives_failed_profile_write(self, session_store, store, notifications):
        store.set = AsyncMock(side_effect=StoreError("PERMISSION_DENIED"))
        await session_store.start()

        result = await session_store.sign_up("noprofile@example.com", "secret123")
        await session_store.settle()

        assert result.ok
        assert session_store.user_id == result.user.uid
        assert session_store.session.email == "noprofile@example.com"
        store.set.assert_awaited_once()
        assert notifications.latest().title == "Account Created"

    @pytest.mark.asyncio
    async def test_duplicate_sign_up_reports_error(self, session_store, notifications):
        await session_store.start()
        await session_store.sign_up("dup@example.com", "secret123")
        result = await session_store.sign_up("dup@example.com", "secret123")

        assert not result.ok
        assert "email-already-in-use" in result.error
        assert notifications.latest().title == "Sign Up Failed"

    @pytest.mark.asyncio
    async def test_wrong_password(self, session_store, accounts, notifications):
        accounts.create("user@example.com", "secret123")
        await session_store.start()

        result = await session_store.sign_in("user@example.com", "wrong-password")

        assert not result.ok
        assert session_store.user_id is None
        assert notifications.latest().title == "Login Failed"

    @pytest.mark.asyncio
    async def test_sign_out_clears_session(self, session_store):
        await session_store.start()
        await session_store.sign_up("out@example.com", "secret123")
        await session_store.sign_out()
        await session_store.settle()
        assert session_store.user_id is None

    def test_require_user_opens_prompt(self, session_store, notifications):
        with pytest.raises(ApplicationError) as exc_info:
            session_store.require_user("save banners")
        assert exc_info.value.code == ErrorCode.AUTH_REQUIRED
        assert session_store.auth_prompt_open is True
        assert notifications.latest().title == "Authentication Required"
