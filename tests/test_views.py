"""Tests for HTML views."""

from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient
from docshelf.config import Config
from docshelf.server import create_app


@pytest.fixture
async def client(test_config: Config, aiohttp_client) -> TestClient:
    return await aiohttp_client(create_app(test_config))


class TestPageView:
    """Tests for GET /{route}."""

    async def test__route__renders_menu_and_content(self, client: TestClient) -> None:
        response = await client.get("/introduction")

        assert response.status == 200
        assert "text/html" in response.headers["Content-Type"]
        body = await response.text()
        assert '<h1 id="react-starter">React starter</h1>' in body
        assert 'href="/introduction" class="active"' in body
        assert "Les Components" in body
        assert "Les Hooks" in body

    async def test__groups__collapsed_by_default(self, client: TestClient) -> None:
        body = await (await client.get("/introduction")).text()

        assert "React.memo" not in body
        assert "useReducer" not in body
        assert 'href="/introduction?open=components"' in body
        assert 'href="/introduction?open=hooks"' in body

    async def test__open_query__expands_only_that_group(self, client: TestClient) -> None:
        body = await (await client.get("/introduction?open=components")).text()

        assert "React.memo" in body
        assert "useReducer" not in body
        # Toggling the open group collapses it, toggling the other keeps both open
        assert 'href="/introduction"' in body
        assert 'href="/introduction?open=components,hooks"' in body

    async def test__entry_links__keep_group_state(self, client: TestClient) -> None:
        body = await (await client.get("/ReactMemo?open=components")).text()

        assert 'href="/useMemo?open=components"' not in body
        assert 'href="/ReactForwardRef?open=components"' in body
        assert 'href="/callApi?open=components"' in body

    async def test__nested_route__renders_document(self, client: TestClient) -> None:
        body = await (await client.get("/useMyHooks")).text()

        assert '<h1 id="usemyhooks">useMyHooks</h1>' in body

    async def test__unmatched_route__renders_empty_content(self, client: TestClient) -> None:
        response = await client.get("/Introduction")

        assert response.status == 200
        body = await response.text()
        assert "<h1" not in body
        assert "React starter" in body

    async def test__root__renders_menu_only(self, client: TestClient) -> None:
        response = await client.get("/")

        assert response.status == 200
        body = await response.text()
        assert "<h1" not in body
        assert "Les calls API" in body

    async def test__missing_document__logged_and_empty(
        self,
        docs_dir: Path,
        client: TestClient,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        (docs_dir / "markdown" / "mutations.md").unlink()

        response = await client.get("/mutations")

        assert response.status == 200
        assert "<h1" not in await response.text()
        assert "Error loading Markdown file /markdown/mutations.md" in caplog.text

    async def test__undecodable_document__logged_and_empty(
        self,
        docs_dir: Path,
        client: TestClient,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        (docs_dir / "markdown" / "useMemo.md").write_bytes(b"# caf\xe9\n")

        response = await client.get("/useMemo?open=hooks")

        assert response.status == 200
        body = await response.text()
        assert "<h1" not in body
        assert 'href="/useMemo?open=hooks" class="active"' in body
        assert "Error loading Markdown file /markdown/useMemo.md for /useMemo" in caplog.text
        assert "not valid UTF-8" in caplog.text

    async def test__live_reload_disabled__no_websocket_script(self, client: TestClient) -> None:
        body = await (await client.get("/introduction")).text()

        assert "/ws/live-reload" not in body


class TestStylesheet:
    """Tests for GET /assets/highlight.css."""

    async def test__stylesheet__served_as_css(self, client: TestClient) -> None:
        response = await client.get("/assets/highlight.css")

        assert response.status == 200
        assert response.headers["Content-Type"].startswith("text/css")
        assert ".highlight" in await response.text()
