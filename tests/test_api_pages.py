"""Tests for pages API endpoint."""

from dataclasses import replace
from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient
from docshelf.config import Config
from docshelf.server import create_app


@pytest.fixture
async def client(test_config: Config, aiohttp_client) -> TestClient:
    """Create test client with configured app."""
    return await aiohttp_client(create_app(test_config))


class TestGetPage:
    """Tests for GET /api/pages/{route}."""

    async def test__known_route__returns_rendered_content(self, client: TestClient) -> None:
        response = await client.get("/api/pages/introduction")

        assert response.status == 200
        data = await response.json()
        assert data["meta"]["title"] == "React starter"
        assert data["meta"]["path"] == "/introduction"
        assert data["meta"]["document"] == "/markdown/introduction.md"
        assert "About React starter." in data["content"]

    async def test__nested_route__returns_page(self, client: TestClient) -> None:
        response = await client.get("/api/pages/ReactSuspense")

        assert response.status == 200
        data = await response.json()
        assert data["meta"]["document"] == "/markdown/Components/ReactSuspense.md"

    async def test__unmatched_route__returns_404(self, client: TestClient) -> None:
        response = await client.get("/api/pages/nonexistent")

        assert response.status == 404
        data = await response.json()
        assert data["error"] == "Page not found"
        assert data["path"] == "/nonexistent"

    async def test__document_removed_after_startup__returns_404(
        self,
        docs_dir: Path,
        client: TestClient,
    ) -> None:
        (docs_dir / "markdown" / "useMemo.md").unlink()

        response = await client.get("/api/pages/useMemo")

        assert response.status == 404
        data = await response.json()
        assert data["error"] == "Document not found"

    async def test__undecodable_document__returns_json_error(
        self,
        docs_dir: Path,
        client: TestClient,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        (docs_dir / "markdown" / "useMemo.md").write_bytes(b"# caf\xe9\n")

        response = await client.get("/api/pages/useMemo")

        assert response.status == 500
        data = await response.json()
        assert data["error"] == "Document could not be loaded"
        assert data["document"] == "/markdown/useMemo.md"
        assert data["reason"] == "not valid UTF-8"
        assert "Error loading Markdown file /markdown/useMemo.md" in caplog.text

    async def test__response__includes_toc(self, docs_dir: Path, client: TestClient) -> None:
        (docs_dir / "markdown" / "useReducer.md").write_text(
            "# useReducer\n\n## Signature\n\nContent.\n\n## Examples\n\nMore."
        )

        response = await client.get("/api/pages/useReducer")

        data = await response.json()
        assert [entry["title"] for entry in data["toc"]] == ["Signature", "Examples"]
        assert data["toc"][0] == {"level": 2, "title": "Signature", "id": "signature"}

    async def test__untitled_document__falls_back_to_menu_label(
        self,
        docs_dir: Path,
        client: TestClient,
    ) -> None:
        (docs_dir / "markdown" / "useCallback.md").write_text("No heading here.\n")

        response = await client.get("/api/pages/useCallback")

        data = await response.json()
        assert data["meta"]["title"] == "useCallback"

    async def test__response__includes_cache_headers(self, client: TestClient) -> None:
        response = await client.get("/api/pages/mutations")

        assert response.status == 200
        assert "ETag" in response.headers
        assert "Last-Modified" in response.headers
        assert response.headers["Cache-Control"] == "private, max-age=60"

    async def test__matching_etag__returns_304(self, client: TestClient) -> None:
        response1 = await client.get("/api/pages/mutations")
        etag = response1.headers["ETag"]

        response2 = await client.get("/api/pages/mutations", headers={"If-None-Match": etag})

        assert response2.status == 304

    async def test__meta__last_modified_is_utc(self, client: TestClient) -> None:
        response = await client.get("/api/pages/callApi")

        data = await response.json()
        assert data["meta"]["last_modified"].endswith("+00:00")


class TestGetPageWithoutCache:
    """Pages API with caching disabled."""

    async def test__cache_disabled__renders_without_cache_dir(
        self,
        test_config: Config,
        aiohttp_client,
    ) -> None:
        config = replace(test_config, docs=replace(test_config.docs, cache_enabled=False))
        client = await aiohttp_client(create_app(config))

        response = await client.get("/api/pages/introduction")

        assert response.status == 200
        assert not config.docs.cache_dir.exists()
