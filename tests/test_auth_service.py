"""Tests for the auth adapters (Firebase REST via httpx.MockTransport)"""
import json

import httpx
import pytest

from bannerforge_api.core.auth_service import FirebaseAuthService, InMemoryAuthService
from bannerforge_api.models.errors import AuthError


def _transport(status_code, body, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)


class TestFirebaseAuthService:
    @pytest.mark.asyncio
    async def test_sign_in_success_notifies_listeners(self):
        seen = []
        service = FirebaseAuthService(
            api_key="test-key",
            transport=_transport(200, {"localId": "uid-1", "email": "a@example.com", "idToken": "tok"}, seen),
        )
        users = []
        service.on_auth_state_changed(users.append)

        user = await service.sign_in("a@example.com", "secret123")

        assert user.uid == "uid-1"
        assert user.id_token == "tok"
        assert users == [None, user]
        request = seen[0]
        assert request.url.path.endswith("/accounts:signInWithPassword")
        assert request.url.params["key"] == "test-key"
        assert json.loads(request.content)["returnSecureToken"] is True

    @pytest.mark.asyncio
    async def test_sign_up_uses_sign_up_endpoint(self):
        seen = []
        service = FirebaseAuthService(api_key="k", transport=_transport(200, {"localId": "uid-2"}, seen))
        user = await service.sign_up("b@example.com", "secret123")
        assert user.email == "b@example.com"
        assert seen[0].url.path.endswith("/accounts:signUp")

    @pytest.mark.asyncio
    async def test_error_code_mapped_to_message(self):
        service = FirebaseAuthService(
            api_key="k",
            transport=_transport(400, {"error": {"code": 400, "message": "EMAIL_EXISTS"}}),
        )
        with pytest.raises(AuthError) as exc_info:
            await service.sign_up("b@example.com", "secret123")
        assert str(exc_info.value) == "Firebase: Error (auth/email-already-in-use)."
        assert service.current_user is None

    @pytest.mark.asyncio
    async def test_unmapped_error_keeps_raw_message(self):
        service = FirebaseAuthService(
            api_key="k",
            transport=_transport(400, {"error": {"message": "WEAK_PASSWORD : Password should be at least 6 characters"}}),
        )
        with pytest.raises(AuthError) as exc_info:
            await service.sign_up("b@example.com", "123")
        assert exc_info.value.code == "WEAK_PASSWORD"

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        service = FirebaseAuthService(api_key="")
        with pytest.raises(AuthError):
            await service.sign_in("a@example.com", "secret123")

    def test_emulator_base_url(self):
        service = FirebaseAuthService(api_key="k", emulator_host="localhost:9099")
        assert service.base_url == "http://localhost:9099/identitytoolkit.googleapis.com/v1"


class TestInMemoryAuthService:
    @pytest.mark.asyncio
    async def test_accounts_shared_between_contexts(self, accounts):
        first = InMemoryAuthService(accounts)
        second = InMemoryAuthService(accounts)

        created = await first.sign_up("shared@example.com", "secret123")
        signed_in = await second.sign_in("shared@example.com", "secret123")

        assert signed_in.uid == created.uid
        assert first.current_user.uid == created.uid

    @pytest.mark.asyncio
    async def test_weak_password(self, accounts):
        service = InMemoryAuthService(accounts)
        with pytest.raises(AuthError) as exc_info:
            await service.sign_up("weak@example.com", "123")
        assert exc_info.value.code == "auth/weak-password"

    @pytest.mark.asyncio
    async def test_unsubscribe(self, accounts):
        service = InMemoryAuthService(accounts)
        users = []
        unsubscribe = service.on_auth_state_changed(users.append)
        unsubscribe()
        await service.sign_up("quiet@example.com", "secret123")
        assert users == [None]
