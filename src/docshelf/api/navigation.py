"""Navigation API endpoint.

Returns the menu tree with per-group state taken from the `open` query
parameter.
"""

from aiohttp import web

from docshelf.app_keys import navigation_key


def create_navigation_routes() -> list[web.RouteDef]:
    return [web.get("/api/navigation", get_navigation)]


async def get_navigation(request: web.Request) -> web.Response:
    navigation = request.app[navigation_key]
    state = navigation.state_from_query(request.query.get("open"))
    return web.json_response({"items": navigation.to_dict(state), "open": state.to_query()})
