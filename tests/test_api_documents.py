"""Tests for raw document endpoint."""

from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient
from docshelf.config import Config
from docshelf.server import create_app


@pytest.fixture
async def client(test_config: Config, aiohttp_client) -> TestClient:
    return await aiohttp_client(create_app(test_config))


class TestGetDocument:
    """Tests for GET <document identifier>."""

    async def test__existing_document__returns_markdown(self, client: TestClient) -> None:
        response = await client.get("/markdown/introduction.md")

        assert response.status == 200
        assert response.headers["Content-Type"].startswith("text/markdown")
        assert await response.text() == "# React starter\n\nAbout React starter.\n"

    async def test__nested_document__returns_markdown(self, client: TestClient) -> None:
        response = await client.get("/markdown/Components/ReactMemo.md")

        assert response.status == 200
        assert "React.memo" in await response.text()

    async def test__missing_document__returns_404(self, client: TestClient) -> None:
        response = await client.get("/markdown/missing.md")

        assert response.status == 404

    async def test__embedded_null_byte__returns_404(self, client: TestClient) -> None:
        response = await client.get("/markdown/a%00b.md")

        assert response.status == 404

    async def test__unrouted_document__is_still_served(
        self,
        docs_dir: Path,
        client: TestClient,
    ) -> None:
        (docs_dir / "notes.md").write_text("notes")

        response = await client.get("/notes.md")

        assert response.status == 200
        assert await response.text() == "notes"
