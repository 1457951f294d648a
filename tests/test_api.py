"""
End-to-end tests of the HTTP surface (FastAPI TestClient)

These tests verify:
1. Unauthenticated saves answer 401, open the auth prompt and write nothing
2. A signed-in user can save, list, load and delete banners
3. A shared link is resolved once for a signed-in visitor and scrubbed from the page URL
"""
import pytest
from fastapi.testclient import TestClient


PAGE_URL = "https://app.example.com/"


def _mount(client, page_url=PAGE_URL):
    response = client.post("/api/workspace", json={"pageUrl": page_url})
    assert response.status_code == 200
    return response.json()


def _sign_up(client, email, password="secret123"):
    response = client.post("/api/auth/signup", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestWorkspace:
    def test_mount_sets_cookie_and_returns_state(self, client):
        state = _mount(client)
        assert state["session"]["userId"] is None
        assert state["loading"] is False
        assert state["isAdmin"] is False
        assert state["banner"]["width"] == 300
        assert client.cookies.get("bf_workspace") == state["workspaceId"]

    def test_requests_without_workspace_are_rejected(self, client):
        response = client.get("/api/banner")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_unmount(self, client, registry):
        state = _mount(client)
        assert client.delete("/api/workspace").status_code == 200
        assert registry.get(state["workspaceId"]) is None


class TestAuthGuard:
    def test_unauthenticated_save_is_blocked(self, client, store):
        _mount(client)

        response = client.post("/api/banners")

        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "AUTH_REQUIRED"
        assert any(n["title"] == "Authentication Required" for n in body["notifications"])
        assert client.get("/api/workspace").json()["authPromptOpen"] is True
        assert not any("/banners/" in path for path in store.documents)

    def test_unauthenticated_social_links_blocked(self, client):
        _mount(client)
        assert client.get("/api/profile/social-links").status_code == 401

    def test_bad_credentials(self, client):
        _mount(client)
        response = client.post("/api/auth/signin", json={"email": "nobody@example.com", "password": "secret123"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "AUTH_FAILED"
        assert body["notifications"][0]["title"] == "Login Failed"


class TestBannerFlow:
    def test_edit_preview_and_html(self, client):
        _mount(client)

        response = client.patch("/api/banner", json={"name": "height", "value": "250"})
        assert response.json()["banner"]["height"] == 250
        assert response.json()["preview"]["imageHeight"] == 150

        assert client.patch("/api/banner", json={"name": "width", "value": "abc"}).status_code == 422

        preview = client.post("/api/banner/preview").json()["preview"]
        assert preview["visible"] is True

        html = client.get("/api/banner/html")
        assert html.headers["content-type"].startswith("text/html")
        assert "height: 150px;" in html.text

    def test_save_list_load_delete(self, client):
        _mount(client)
        state = _sign_up(client, "flow@example.com")
        assert state["session"]["email"] == "flow@example.com"
        assert state["authPromptOpen"] is False

        client.patch("/api/banner", json={"name": "description", "value": "My saved banner"})
        saved = client.post("/api/banners")
        assert saved.status_code == 201
        banner_id = saved.json()["id"]

        banners = client.get("/api/banners").json()["banners"]
        assert [b["id"] for b in banners] == [banner_id]
        assert banners[0]["description"] == "My saved banner"

        client.patch("/api/banner", json={"name": "description", "value": "changed"})
        loaded = client.post(f"/api/banners/{banner_id}/load").json()
        assert loaded["banner"]["description"] == "My saved banner"
        assert any(n["title"] == "Banner Loaded" for n in loaded["notifications"])

        assert client.delete(f"/api/banners/{banner_id}").status_code == 200
        assert client.get("/api/banners").json()["banners"] == []

    def test_sign_out_clears_saved_list(self, client):
        _mount(client)
        _sign_up(client, "leaver@example.com")
        client.post("/api/banners")
        assert len(client.get("/api/banners").json()["banners"]) == 1

        state = client.post("/api/auth/signout").json()
        assert state["session"]["userId"] is None
        assert state["savedBanners"] == []


class TestContentFlow:
    def test_apply_idea(self, client):
        _mount(client)
        ideas = client.post("/api/content/ideas", json={"prompt": "yoga course"}).json()["ideas"]["ideas"]
        assert len(ideas) == 3

        applied = client.post("/api/content/ideas/1/apply").json()
        assert applied["banner"]["description"] == "Catchy description 1"
        assert applied["banner"]["buttonText"] == "Buy 1"
        assert applied["preview"]["visible"] is True

    def test_amazon_without_link_does_not_call_api(self, client, mock_agents):
        _mount(client)
        response = client.post("/api/content/amazon", json={"prompt": "Headphones", "affiliateLink": ""})
        assert response.status_code == 422
        mock_agents.amazon_content.assert_not_called()

    def test_shared_link_round_trip(self, app, client, mock_agents):
        _mount(client)
        _sign_up(client, "sharer@example.com")
        generated = client.post("/api/content/general", json={"prompt": "New phone", "platform": "x"}).json()
        assert "Content for X:" in generated["general"]["htmlOutput"]

        shared = client.post("/api/content/general/share").json()
        assert shared["url"] == f"{PAGE_URL}?sharedAiContentId={shared['id']}"

        with TestClient(app) as visitor:
            state = _mount(visitor, shared["url"])
            # Not resolved for a signed-out visitor
            assert state["pageUrl"] == shared["url"]
            assert state["content"]["general"]["content"] == ""

            state = _sign_up(visitor, "visitor@example.com")
            assert state["pageUrl"] == PAGE_URL
            assert state["content"]["general"]["content"] == "Line one\nLine two"
            assert state["content"]["general"]["platform"] == "x"
            assert any(n["title"] == "Shared Content Loaded" for n in state["notifications"])

            # One-shot: signing out and in again does not fetch anything new
            visitor.post("/api/auth/signout")
            state = visitor.post("/api/auth/signin", json={"email": "visitor@example.com", "password": "secret123"}).json()
            assert not any(n["title"] == "Shared Content Loaded" for n in state["notifications"])


def test_social_links_round_trip(client):
    _mount(client)
    _sign_up(client, "social@example.com")

    response = client.put("/api/profile/social-links", json={"twitter": "https://x.com/me", "github": ""})
    assert response.status_code == 200
    assert response.json()["socialLinks"]["twitter"] == "https://x.com/me"

    links = client.get("/api/profile/social-links").json()["socialLinks"]
    assert links["twitter"] == "https://x.com/me"
    assert links["github"] is None
