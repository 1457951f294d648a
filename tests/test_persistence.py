"""
Tests for the persistence facade

These tests verify:
1. User-scoped operations never reach the store without a user id
2. Listing without a user delivers an empty list instead of an error
3. Banners are listed newest first with ISO timestamps
4. Store failures surface as DATABASE_ERROR
"""
import pytest
from unittest.mock import AsyncMock, Mock

from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.models.errors import ApplicationError, ErrorCode, StoreError
from bannerforge_api.models.schemas import BannerConfig, SharedAiContent, SocialLinks


class TestUserGuard:
    def test_list_without_user_delivers_empty_list(self, persistence, store):
        on_data = Mock()
        on_error = Mock()
        unsubscribe = persistence.list_banners(None, on_data, on_error)

        on_data.assert_called_once_with([])
        on_error.assert_not_called()
        assert store.listener_count == 0
        unsubscribe()

    @pytest.mark.asyncio
    async def test_save_without_user_rejected_before_write(self, persistence, store):
        with pytest.raises(ApplicationError) as exc_info:
            await persistence.save_banner(None, BannerConfig())
        assert exc_info.value.code == ErrorCode.AUTH_REQUIRED
        assert store.documents == {}

    @pytest.mark.asyncio
    async def test_delete_and_share_without_user_rejected(self):
        store = Mock()
        store.delete = AsyncMock()
        store.add = AsyncMock()
        facade = PersistenceFacade(store, tenant_id="")

        with pytest.raises(ApplicationError):
            await facade.delete_banner(None, "abc")
        with pytest.raises(ApplicationError):
            await facade.share_content("", SharedAiContent(content="x"))

        store.delete.assert_not_called()
        store.add.assert_not_called()


class TestBanners:
    @pytest.mark.asyncio
    async def test_save_then_list_newest_first(self, persistence, store):
        first = await persistence.save_banner("u1", BannerConfig(description="first"))
        second = await persistence.save_banner("u1", BannerConfig(description="second"))

        received = []
        unsubscribe = persistence.list_banners("u1", received.append, Mock())
        banners = received[-1]

        assert [b.id for b in banners] == [second, first]
        assert isinstance(banners[0].created_at, str)
        assert "T" in banners[0].created_at
        unsubscribe()
        assert store.listener_count == 0

    @pytest.mark.asyncio
    async def test_saved_document_uses_camel_case(self, persistence, store):
        doc_id = await persistence.save_banner("u1", BannerConfig(width=512))
        data = store.documents[f"users/u1/banners/{doc_id}"]
        assert data["width"] == 512
        assert data["backgroundColor"] == "#1a1a2e"
        assert "createdAt" in data
        assert "id" not in data

    @pytest.mark.asyncio
    async def test_subscription_sees_later_writes_and_deletes(self, persistence):
        received = []
        persistence.list_banners("u1", received.append, Mock())
        assert received[-1] == []

        doc_id = await persistence.save_banner("u1", BannerConfig())
        assert [b.id for b in received[-1]] == [doc_id]

        await persistence.delete_banner("u1", doc_id)
        assert received[-1] == []

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, persistence):
        await persistence.save_banner("alice", BannerConfig())
        received = []
        persistence.list_banners("bob", received.append, Mock())
        assert received[-1] == []

    @pytest.mark.asyncio
    async def test_store_failure_becomes_database_error(self):
        store = Mock()
        store.add = AsyncMock(side_effect=StoreError("permission-denied"))
        facade = PersistenceFacade(store, tenant_id="")

        with pytest.raises(ApplicationError) as exc_info:
            await facade.save_banner("u1", BannerConfig())
        assert exc_info.value.code == ErrorCode.DATABASE_ERROR
        assert exc_info.value.http_status == 502


class TestSharedContent:
    @pytest.mark.asyncio
    async def test_share_stamps_owner_and_time(self, persistence, store):
        doc_id = await persistence.share_content("u1", SharedAiContent(prompt="p", content="c", platform="x"))
        data = store.documents[f"publicSharedAiContent/{doc_id}"]
        assert data["sharedBy"] == "u1"
        assert data["sharedAt"] is not None

        record = await persistence.get_shared_ai_content(doc_id)
        assert record.content == "c"
        assert record.platform == "x"
        assert isinstance(record.shared_at, str)

    @pytest.mark.asyncio
    async def test_missing_shared_record(self, persistence):
        assert await persistence.get_shared_amazon_content("nope") is None

    @pytest.mark.asyncio
    async def test_tenant_prefix(self, store):
        facade = PersistenceFacade(store, tenant_id="tenant-1")
        doc_id = await facade.save_banner("u1", BannerConfig())
        assert f"artifacts/tenant-1/users/u1/banners/{doc_id}" in store.documents


class TestProfile:
    @pytest.mark.asyncio
    async def test_ensure_profile_is_idempotent(self, persistence, store):
        assert await persistence.ensure_profile("u1", "a@example.com") is True
        assert await persistence.ensure_profile("u1", "a@example.com") is False
        assert store.documents["users/u1"]["isAdmin"] is False

    @pytest.mark.asyncio
    async def test_update_social_links_keeps_other_fields(self, persistence, store):
        await store.set("users/u1", {"email": "a@example.com", "isAdmin": True})
        saved = await persistence.update_social_links("u1", SocialLinks(twitter="https://x.com/a", github="  ", website=""))

        assert saved.twitter == "https://x.com/a"
        assert saved.github is None
        profile = store.documents["users/u1"]
        assert profile["isAdmin"] is True
        assert profile["socialLinks"] == {"twitter": "https://x.com/a"}

    @pytest.mark.asyncio
    async def test_social_links_absent(self, persistence):
        assert await persistence.get_social_links("u1") is None
        assert await persistence.get_social_links(None) is None
