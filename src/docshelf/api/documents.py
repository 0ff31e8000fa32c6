"""Raw document endpoint.

Serves Markdown resources from the docs directory as UTF-8 text, the
resource side of `GET <document identifier>`.
"""

from aiohttp import web

from docshelf.app_keys import source_key
from docshelf.core.sources import DocumentLoadError, DocumentNotFoundError


def create_document_routes() -> list[web.RouteDef]:
    return [web.get(r"/{path:.+\.md}", get_document)]


async def get_document(request: web.Request) -> web.Response:
    identifier = f"/{request.match_info['path']}"
    source = request.app[source_key]

    try:
        text = await source.fetch(identifier)
    except DocumentNotFoundError:
        raise web.HTTPNotFound(text=f"Document not found: {identifier}")
    except DocumentLoadError as e:
        raise web.HTTPInternalServerError(text=f"Document could not be read: {e.reason}")

    return web.Response(text=text, content_type="text/markdown", charset="utf-8")
