"""Shared fixtures"""
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from bannerforge_api.agents.schemas import AmazonContentOutput, GeneralContentOutput
from bannerforge_api.core.auth_service import InMemoryAccounts, InMemoryAuthService
from bannerforge_api.core.document_store import InMemoryDocumentStore
from bannerforge_api.core.notifications import NotificationLog
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.core.workspace import WorkspaceRegistry
from bannerforge_api.models.schemas import BannerIdea


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def accounts():
    return InMemoryAccounts()


@pytest.fixture
def notifications():
    return NotificationLog()


@pytest.fixture
def persistence(store):
    return PersistenceFacade(store, tenant_id="")


@pytest.fixture
def sample_ideas():
    return [
        BannerIdea(
            idea_name=f"Idea {i}",
            description_suggestion=f"Catchy description {i}",
            cta_suggestion=f"Buy {i}",
            visual_concept=f"Visual {i}",
        )
        for i in range(3)
    ]


@pytest.fixture
def mock_agents(sample_ideas):
    """Generation agents with canned results"""
    agents = Mock()
    agents.general_content = AsyncMock(return_value=GeneralContentOutput(content="Line one\nLine two"))
    agents.amazon_content = AsyncMock(return_value=AmazonContentOutput(content="Great product.\nBuy now!"))
    agents.banner_ideas = AsyncMock(return_value=sample_ideas)
    return agents


@pytest.fixture
def registry(accounts, store, mock_agents):
    return WorkspaceRegistry(
        auth_factory=lambda: InMemoryAuthService(accounts),
        store_factory=lambda: store,
        agents=mock_agents,
    )


@pytest.fixture
def app(registry):
    from bannerforge_api.api.deps import get_registry
    from bannerforge_api.main import app

    app.dependency_overrides[get_registry] = lambda: registry
    yield app
    app.dependency_overrides.clear()
