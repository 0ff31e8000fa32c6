"""WebSocket-based live reload for development mode.

Monitors Markdown sources for changes and notifies connected clients via
WebSocket so pages showing a changed document reload.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from docshelf.core.navigation import Navigation
from docshelf.core.renderer import PageRenderer

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload."""

    def __init__(
        self,
        source_dir: Path,
        navigation: Navigation,
        watch_patterns: list[str] | None = None,
        *,
        renderer: PageRenderer | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            source_dir: Directory to watch for changes
            navigation: Menu whose routes are notified on document changes
            watch_patterns: Glob patterns to watch (default: ["**/*.md"])
            renderer: PageRenderer whose cache entries are dropped on change
        """
        self._source_dir = source_dir.resolve()
        self._navigation = navigation
        self._watch_patterns = watch_patterns or ["**/*.md"]
        self._renderer = renderer
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Watch for file changes and broadcast reload events."""
        async for changes in awatch(self._source_dir):
            for change_type, path_str in changes:
                if change_type == Change.deleted:
                    continue

                path = Path(path_str)
                if not self._matches_patterns(path):
                    continue

                document = self.to_document(path)
                logger.info(f"Document changed: {document}")
                if self._renderer is not None:
                    self._renderer.invalidate(document)

                for route in self.routes_for(document):
                    await self._broadcast_reload(route)

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path matches any watch pattern."""
        try:
            relative = path.relative_to(self._source_dir)
        except ValueError:
            return False

        # Relative patterns match from the right, so "**/" adds nothing and
        # would reject files at the top of source_dir
        return any(
            relative.match(pattern.removeprefix("**/")) for pattern in self._watch_patterns
        )

    def to_document(self, file_path: Path) -> str:
        """Convert a file system path to a document identifier.

        Args:
            file_path: Absolute file path under source_dir

        Returns:
            Document identifier (e.g., "/markdown/useMemo.md")
        """
        return f"/{file_path.relative_to(self._source_dir).as_posix()}"

    def routes_for(self, document: str) -> list[str]:
        """Return every route that displays a document."""
        return [route for route, target in self._navigation.routes.items() if target == document]

    async def _broadcast_reload(self, route: str) -> None:
        """Broadcast reload event to all connected clients."""
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "path": route})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket."""
    return [web.get("/ws/live-reload", manager.handle_websocket)]
