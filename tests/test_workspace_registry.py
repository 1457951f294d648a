"""Tests for workspace registry lifetime and idle eviction"""
import pytest

from bannerforge_api.core.auth_service import InMemoryAuthService
from bannerforge_api.core.workspace import WorkspaceRegistry


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def idle_registry(accounts, store, mock_agents, clock):
    return WorkspaceRegistry(
        auth_factory=lambda: InMemoryAuthService(accounts),
        store_factory=lambda: store,
        agents=mock_agents,
        idle_timeout=60,
        clock=clock,
    )


class TestIdleEviction:
    @pytest.mark.asyncio
    async def test_idle_workspace_is_unmounted(self, idle_registry, clock, store):
        workspace = await idle_registry.mount("https://app.example.com/")
        await workspace.session.sign_up("idle@example.com", "secret123")
        await workspace.session.settle()
        assert store.listener_count == 1

        clock.now += 61
        evicted = await idle_registry.evict_idle()

        assert evicted == [workspace.workspace_id]
        assert idle_registry.get(workspace.workspace_id) is None
        assert workspace.mounted is False
        assert store.listener_count == 0

    @pytest.mark.asyncio
    async def test_access_keeps_workspace_alive(self, idle_registry, clock):
        workspace = await idle_registry.mount("https://app.example.com/")

        clock.now += 50
        assert idle_registry.get(workspace.workspace_id) is workspace
        clock.now += 50

        assert await idle_registry.evict_idle() == []
        assert idle_registry.get(workspace.workspace_id) is workspace

    @pytest.mark.asyncio
    async def test_unmount_forgets_access_time(self, idle_registry):
        workspace = await idle_registry.mount("https://app.example.com/")
        assert await idle_registry.unmount(workspace.workspace_id) is True
        assert idle_registry.last_access == {}
        assert await idle_registry.unmount(workspace.workspace_id) is False
