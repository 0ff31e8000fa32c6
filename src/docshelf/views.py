"""HTML views: the menu shell and rendered content area.

Menu group state travels in the `open` query parameter, so expanding a
group is a plain link to the toggled state and selecting an entry keeps the
state of every group.
"""

import asyncio
import logging

import jinja2
from aiohttp import web

from docshelf.app_keys import (
    live_reload_enabled_key,
    navigation_key,
    renderer_key,
    stylesheet_key,
    templates_key,
)
from docshelf.core.navigation import MenuState
from docshelf.core.sources import DocumentLoadError

logger = logging.getLogger(__name__)


def create_template_environment() -> jinja2.Environment:
    """Create the Jinja environment for bundled templates."""
    return jinja2.Environment(
        loader=jinja2.PackageLoader("docshelf", "templates"),
        autoescape=jinja2.select_autoescape(["html"]),
    )


def create_view_routes() -> list[web.RouteDef]:
    """Create HTML routes.

    The page route matches everything, so these must be registered last.
    """
    return [
        web.get("/assets/highlight.css", get_stylesheet),
        web.get("/{path:.*}", get_page_view),
    ]


async def get_stylesheet(request: web.Request) -> web.Response:
    return web.Response(text=request.app[stylesheet_key], content_type="text/css")


async def get_page_view(request: web.Request) -> web.Response:
    """Render the menu and the content of the selected route.

    An unmatched route, or a document that fails to render, leaves the
    content area empty.
    """
    route = f"/{request.match_info['path']}"
    navigation = request.app[navigation_key]
    renderer = request.app[renderer_key]
    state = navigation.state_from_query(request.query.get("open"))

    content = ""
    title = None
    document = navigation.select(route)
    if document is not None:
        try:
            result = await asyncio.to_thread(renderer.render, document)
        except FileNotFoundError:
            logger.warning(f"Error loading Markdown file {document} for {route}")
        except DocumentLoadError as e:
            logger.warning(f"Error loading Markdown file {document} for {route}: {e.reason}")
        else:
            content = result.html
            title = result.title

    template = request.app[templates_key].get_template("page.html")
    body = template.render(
        navigation=navigation,
        state=state,
        route=route,
        title=title,
        content=content,
        toggle_href=_toggle_href(route, state),
        entry_href=_entry_href(state),
        live_reload=request.app[live_reload_enabled_key],
    )
    return web.Response(text=body, content_type="text/html")


def _toggle_href(route: str, state: MenuState):
    def href(group_id: str) -> str:
        return _with_open(route, state.toggle(group_id))

    return href


def _entry_href(state: MenuState):
    def href(route: str) -> str:
        return _with_open(route, state)

    return href


def _with_open(route: str, state: MenuState) -> str:
    query = state.to_query()
    return f"{route}?open={query}" if query else route
