"""Document sources.

A source turns a document identifier into raw Markdown text. FileSource reads
from the docs directory; HttpSource fetches from a running server.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

import httpx

from docshelf.core.routes import find_document_file

logger = logging.getLogger(__name__)


class DocumentLoadError(Exception):
    """Raised when a document cannot be retrieved or decoded."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


class DocumentNotFoundError(DocumentLoadError):
    """Raised when no document exists for an identifier."""


class DocumentSource(Protocol):
    """Anything that can fetch raw Markdown text by identifier."""

    async def fetch(self, identifier: str) -> str: ...


class FileSource:
    """Reads documents from the docs directory.

    Reads run in a worker thread so the event loop stays responsive.
    """

    def __init__(self, source_dir: Path) -> None:
        self._source_dir = source_dir

    @property
    def source_dir(self) -> Path:
        return self._source_dir

    async def fetch(self, identifier: str) -> str:
        """Read a document.

        Raises:
            DocumentNotFoundError: If the file doesn't exist or escapes source_dir
            DocumentLoadError: If the file can't be read or isn't UTF-8
        """
        return await asyncio.to_thread(self._read, identifier)

    def _read(self, identifier: str) -> str:
        source_path = find_document_file(self._source_dir, identifier)
        if source_path is None:
            raise DocumentNotFoundError(identifier, "not found")

        try:
            return source_path.read_bytes().decode("utf-8")
        except OSError as e:
            raise DocumentLoadError(identifier, str(e)) from e
        except UnicodeDecodeError as e:
            raise DocumentLoadError(identifier, "not valid UTF-8") from e


class HttpSource:
    """Fetches documents with `GET <base_url><identifier>`.

    Any non-2xx status, transport error, non-text content type or decoding
    error is reported as DocumentLoadError. There are no retries.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize source.

        Args:
            base_url: Server root, e.g., "http://127.0.0.1:8080"
            timeout: Request timeout in seconds
            client: Preconfigured client (owned by the caller)
        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch(self, identifier: str) -> str:
        url = f"{self._base_url}/{identifier.lstrip('/')}"
        logger.debug(f"GET {url}")

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise DocumentLoadError(identifier, f"request failed: {e}") from e

        if response.status_code == 404:
            raise DocumentNotFoundError(identifier, "not found")
        if not response.is_success:
            raise DocumentLoadError(identifier, f"HTTP {response.status_code}")

        content_type = response.headers.get("Content-Type", "text/plain")
        if not content_type.startswith("text/"):
            raise DocumentLoadError(identifier, f"unexpected content type {content_type}")

        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentLoadError(identifier, "not valid UTF-8") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpSource":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
