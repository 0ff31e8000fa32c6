"""Pages API endpoint.

Resolves a menu route to its document and returns JSON with metadata, ToC,
and rendered HTML content.
"""

import asyncio
import logging
from datetime import UTC, datetime
from email.utils import formatdate
from hashlib import md5

from aiohttp import web

from docshelf.app_keys import navigation_key, renderer_key
from docshelf.core.sources import DocumentLoadError

logger = logging.getLogger(__name__)


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    route = f"/{request.match_info['path']}"
    renderer = request.app[renderer_key]
    navigation = request.app[navigation_key]

    document = navigation.select(route)
    if document is None:
        return web.json_response(
            {"error": "Page not found", "path": route},
            status=404,
        )

    try:
        result = await asyncio.to_thread(renderer.render, document)
    except FileNotFoundError:
        logger.warning(f"Route {route} references missing document {document}")
        return web.json_response(
            {"error": "Document not found", "path": route, "document": document},
            status=404,
        )
    except DocumentLoadError as e:
        logger.warning(f"Error loading Markdown file {document} for {route}: {e.reason}")
        return web.json_response(
            {
                "error": "Document could not be loaded",
                "path": route,
                "document": document,
                "reason": e.reason,
            },
            status=500,
        )

    last_modified = datetime.fromtimestamp(result.source_path.stat().st_mtime, tz=UTC)

    etag = _compute_etag(result.html)

    if_none_match = request.headers.get("If-None-Match")
    if if_none_match == etag:
        return web.Response(status=304)

    nav_entry = navigation.find_entry(route)

    response_data = {
        "meta": {
            "title": result.title or (nav_entry.label if nav_entry else None),
            "path": route,
            "document": document,
            "last_modified": last_modified.isoformat(),
        },
        "toc": [toc_entry.to_dict() for toc_entry in result.toc],
        "content": result.html,
    }

    return web.json_response(
        response_data,
        headers={
            "ETag": etag,
            "Last-Modified": formatdate(last_modified.timestamp(), usegmt=True),
            "Cache-Control": "private, max-age=60",
        },
    )


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) of the content hash
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
