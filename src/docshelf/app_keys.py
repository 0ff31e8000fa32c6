"""Application keys for type-safe app configuration access."""

import jinja2
from aiohttp import web

from docshelf.core.navigation import Navigation
from docshelf.core.renderer import PageRenderer
from docshelf.core.sources import FileSource
from docshelf.live import LiveReloadManager

renderer_key = web.AppKey("renderer", PageRenderer)
navigation_key = web.AppKey("navigation", Navigation)
source_key = web.AppKey("source", FileSource)
templates_key = web.AppKey("templates", jinja2.Environment)
stylesheet_key = web.AppKey("stylesheet", str)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)
