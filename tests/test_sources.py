"""Tests for document sources."""

from pathlib import Path

import httpx
import pytest
from docshelf.core.sources import (
    DocumentLoadError,
    DocumentNotFoundError,
    FileSource,
    HttpSource,
)


class TestFileSource:
    """Tests for FileSource.fetch()."""

    async def test__existing_document__returns_text(self, tmp_path: Path) -> None:
        (tmp_path / "markdown").mkdir()
        (tmp_path / "markdown" / "intro.md").write_text("# Intro\n", encoding="utf-8")

        text = await FileSource(tmp_path).fetch("/markdown/intro.md")

        assert text == "# Intro\n"

    async def test__missing_document__raises_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentNotFoundError):
            await FileSource(tmp_path).fetch("/missing.md")

    async def test__path_traversal__raises_not_found(self, tmp_path: Path) -> None:
        source_dir = tmp_path / "public"
        source_dir.mkdir()
        (tmp_path / "secret.md").write_text("secret")

        with pytest.raises(DocumentNotFoundError):
            await FileSource(source_dir).fetch("/../secret.md")

    async def test__invalid_utf8__raises_load_error(self, tmp_path: Path) -> None:
        (tmp_path / "binary.md").write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(DocumentLoadError, match="not valid UTF-8"):
            await FileSource(tmp_path).fetch("/binary.md")

    async def test__embedded_null_byte__raises_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentNotFoundError):
            await FileSource(tmp_path).fetch("/markdown/intro\x00.md")


def _source(handler) -> HttpSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpSource("http://docs.test/", client=client)


class TestHttpSource:
    """Tests for HttpSource.fetch()."""

    async def test__ok_response__returns_text(self) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(
                200,
                text="# Hello\n",
                headers={"Content-Type": "text/markdown; charset=utf-8"},
            )

        text = await _source(handler).fetch("/markdown/introduction.md")

        assert text == "# Hello\n"
        assert requested == ["http://docs.test/markdown/introduction.md"]

    async def test__404__raises_not_found(self) -> None:
        source = _source(lambda request: httpx.Response(404, text="missing"))

        with pytest.raises(DocumentNotFoundError):
            await source.fetch("/missing.md")

    async def test__server_error__raises_load_error(self) -> None:
        source = _source(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(DocumentLoadError, match="HTTP 500"):
            await source.fetch("/a.md")

    async def test__network_error__raises_load_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DocumentLoadError, match="request failed"):
            await _source(handler).fetch("/a.md")

    async def test__non_text_response__raises_load_error(self) -> None:
        source = _source(
            lambda request: httpx.Response(
                200,
                content=b"\x89PNG",
                headers={"Content-Type": "image/png"},
            )
        )

        with pytest.raises(DocumentLoadError, match="unexpected content type"):
            await source.fetch("/a.md")

    async def test__invalid_utf8__raises_load_error(self) -> None:
        source = _source(
            lambda request: httpx.Response(
                200,
                content=b"\xff\xfe",
                headers={"Content-Type": "text/plain"},
            )
        )

        with pytest.raises(DocumentLoadError, match="not valid UTF-8"):
            await source.fetch("/a.md")

    async def test__context_manager__closes_owned_client(self) -> None:
        async with HttpSource("http://docs.test") as source:
            pass

        assert source._client.is_closed
