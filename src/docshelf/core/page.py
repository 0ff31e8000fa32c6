"""Content page: loads a document by identifier and renders it.

Every load is tagged with a generation number. Issuing a new load cancels
the previous in-flight fetch, and a completion whose generation is no longer
current is discarded, so displayed content always matches the most recently
requested identifier.
"""

import asyncio
import logging
from enum import Enum

from docshelf.core.renderer import MarkdownRenderer, RenderedDocument, TocEntry
from docshelf.core.sources import DocumentLoadError, DocumentSource

logger = logging.getLogger(__name__)


class PageState(Enum):
    """Load status of the content page."""

    IDLE = "idle"
    LOADING = "loading"
    DISPLAYED = "displayed"


class ContentPage:
    """Displays the rendered content of one document at a time.

    Fetch failures are logged and leave the previously displayed content in
    place; they never propagate to the caller.
    """

    def __init__(self, source: DocumentSource, renderer: MarkdownRenderer) -> None:
        self._source = source
        self._renderer = renderer
        self._identifier: str | None = None
        self._content = ""
        self._document: RenderedDocument | None = None
        self._document_identifier: str | None = None
        self._state = PageState.IDLE
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def identifier(self) -> str | None:
        """Most recently requested identifier."""
        return self._identifier

    @property
    def displayed_identifier(self) -> str | None:
        """Identifier whose content is currently displayed."""
        return self._document_identifier

    @property
    def content(self) -> str:
        """Raw Markdown of the displayed document, empty before the first load."""
        return self._content

    @property
    def html(self) -> str:
        return self._document.html if self._document is not None else ""

    @property
    def title(self) -> str | None:
        return self._document.title if self._document is not None else None

    @property
    def toc(self) -> list[TocEntry]:
        return self._document.toc if self._document is not None else []

    @property
    def state(self) -> PageState:
        return self._state

    def load(self, identifier: str) -> asyncio.Task[None]:
        """Start loading a document.

        Must be called from a running event loop. Returns immediately; the
        returned task completes once the fetch has been applied or dropped.

        Args:
            identifier: Document identifier, e.g., "/markdown/introduction.md"
        """
        if self._task is not None and not self._task.done():
            logger.debug(f"Cancelling superseded load of {self._identifier}")
            self._task.cancel()

        self._generation += 1
        self._identifier = identifier
        self._state = PageState.LOADING
        self._task = asyncio.create_task(self._load(identifier, self._generation))
        return self._task

    async def wait(self) -> None:
        """Wait for the current load, if any, to finish."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if self._task.cancelled():
                return
            raise

    async def close(self) -> None:
        """Cancel any in-flight load."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def _load(self, identifier: str, generation: int) -> None:
        try:
            text = await self._source.fetch(identifier)
        except DocumentLoadError as e:
            logger.warning(f"Error loading Markdown file {identifier}: {e.reason}")
            if generation == self._generation:
                self._state = (
                    PageState.IDLE if self._document is None else PageState.DISPLAYED
                )
            return

        if generation != self._generation:
            logger.debug(f"Discarding stale content for {identifier}")
            return

        logger.debug(f"Loaded {len(text)} characters from {identifier}")
        self._document = self._renderer.render(text)
        self._document_identifier = identifier
        self._content = text
        self._state = PageState.DISPLAYED
