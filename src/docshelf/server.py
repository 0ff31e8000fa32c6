"""aiohttp server for Docshelf.

Application factory and route registration.
"""

import logging

from aiohttp import web

from docshelf.api.documents import create_document_routes
from docshelf.api.navigation import create_navigation_routes
from docshelf.api.pages import create_pages_routes
from docshelf.app_keys import (
    live_reload_enabled_key,
    live_reload_manager_key,
    navigation_key,
    renderer_key,
    source_key,
    stylesheet_key,
    templates_key,
)
from docshelf.config import Config
from docshelf.core.cache import FileCache
from docshelf.core.navigation import Navigation
from docshelf.core.renderer import MarkdownRenderer, PageRenderer
from docshelf.core.sources import FileSource
from docshelf.live import LiveReloadManager
from docshelf.live.reload import create_live_reload_routes
from docshelf.views import create_template_environment, create_view_routes

logger = logging.getLogger(__name__)


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application

    Raises:
        RouteTableError: If validation is enabled and a route's document is missing
        ValueError: If the navigation declares duplicate routes or groups
    """
    app = web.Application()

    navigation = Navigation(config.navigation)
    if config.docs.validate_routes:
        navigation.routes.validate(config.docs.source_dir)
    logger.info(f"Loaded {len(navigation.routes)} routes from {config.docs.source_dir}")

    markdown = MarkdownRenderer(
        style=config.highlight.style,
        allow_raw_html=config.docs.allow_raw_html,
    )
    cache = FileCache(config.docs.cache_dir) if config.docs.cache_enabled else None
    renderer = PageRenderer(config.docs.source_dir, markdown, cache)

    app[navigation_key] = navigation
    app[renderer_key] = renderer
    app[source_key] = FileSource(config.docs.source_dir)
    app[templates_key] = create_template_environment()
    # Theme is fixed for the lifetime of the app
    app[stylesheet_key] = markdown.stylesheet()
    app[live_reload_enabled_key] = config.live_reload.enabled

    # API routes (must be registered first to take precedence over page views)
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())

    if config.live_reload.enabled:
        manager = LiveReloadManager(
            config.docs.source_dir,
            navigation,
            watch_patterns=config.live_reload.watch_patterns,
            renderer=renderer,
        )
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    app.router.add_routes(create_document_routes())

    # Page views - must be last to catch all remaining routes
    app.router.add_routes(create_view_routes())

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    await app[live_reload_manager_key].stop()


def run_server(config: Config) -> None:
    """Run the server."""
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
