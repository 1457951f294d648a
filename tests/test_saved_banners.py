"""Tests for the live saved-banner list"""
from unittest.mock import Mock

import pytest

from bannerforge_api.core.document_store import StoredDocument
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.core.saved_banners import SavedBannersState
from bannerforge_api.models.schemas import BannerConfig, Session


@pytest.fixture
def saved(persistence, notifications):
    return SavedBannersState(persistence, notifications)


class TestSubscription:
    @pytest.mark.asyncio
    async def test_signed_out_delivers_empty_list(self, saved, store):
        await saved.on_session(Session())
        assert saved.banners == []
        assert saved.loading is False
        assert store.listener_count == 0

    @pytest.mark.asyncio
    async def test_follows_writes(self, saved, persistence):
        await saved.on_session(Session(user_id="u1"))
        doc_id = await persistence.save_banner("u1", BannerConfig())
        assert [b.id for b in saved.banners] == [doc_id]
        assert saved.find(doc_id) is not None

    @pytest.mark.asyncio
    async def test_identity_change_resubscribes(self, saved, persistence, store):
        await persistence.save_banner("alice", BannerConfig(description="alice's"))
        await saved.on_session(Session(user_id="alice"))
        assert len(saved.banners) == 1

        await saved.on_session(Session(user_id="bob"))
        assert saved.banners == []
        assert store.listener_count == 1

        # A stale subscription would pick this up
        await persistence.save_banner("alice", BannerConfig())
        assert saved.banners == []

    @pytest.mark.asyncio
    async def test_same_identity_keeps_subscription(self, saved, store):
        await saved.on_session(Session(user_id="u1"))
        await saved.on_session(Session(user_id="u1"))
        assert store.listener_count == 1

    @pytest.mark.asyncio
    async def test_sign_out_and_close_unsubscribe(self, saved, store):
        await saved.on_session(Session(user_id="u1"))
        await saved.on_session(Session())
        assert store.listener_count == 0

        await saved.on_session(Session(user_id="u1"))
        saved.close()
        assert store.listener_count == 0

    @pytest.mark.asyncio
    async def test_late_snapshot_after_sign_out_is_ignored(self, notifications):
        deliveries = []
        store = Mock()
        store.listen.side_effect = lambda collection, order_by, descending, on_data, on_error: deliveries.append(on_data) or Mock()
        saved = SavedBannersState(PersistenceFacade(store, tenant_id=""), notifications)

        await saved.on_session(Session(user_id="alice"))
        await saved.on_session(Session())
        # Snapshot that was already in flight when the subscription closed
        deliveries[0]([StoredDocument(id="b1", data={"description": "alice private"})])

        assert saved.banners == []
        assert saved.user_id is None

    def test_subscription_error_reported(self, saved, notifications):
        saved._on_error(RuntimeError("permission-denied"))
        assert saved.loading is False
        assert notifications.latest().title == "Error Loading Banners"


class TestStream:
    @pytest.mark.asyncio
    async def test_stream_receives_current_and_later_lists(self, saved, persistence):
        await saved.on_session(Session(user_id="u1"))
        queue = saved.open_stream()

        assert await queue.get() == []
        doc_id = await persistence.save_banner("u1", BannerConfig())
        latest = await queue.get()
        assert [b.id for b in latest] == [doc_id]

        saved.close()
        assert await queue.get() is None
