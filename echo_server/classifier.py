"""Selects the responder for an inbound request."""

from enum import Enum

from aiohttp import web

from .config import Settings


class Route(Enum):
    DUPLEX = "duplex"
    STATIC_PAGE = "static_page"
    PUSH_STREAM = "push_stream"
    PLAIN = "plain"


def is_websocket_upgrade(request: web.BaseRequest) -> bool:
    """Return True if the request carries a handshake aiohttp would accept.

    ``can_prepare`` runs the same header validation as the real handshake
    without writing anything, so half-formed upgrade attempts report False.
    """
    if request.method != "GET":
        return False
    return web.WebSocketResponse().can_prepare(request).ok


def classify(request: web.BaseRequest, settings: Settings) -> Route:
    """Pick exactly one route. The WebSocket check wins over the path checks."""
    if is_websocket_upgrade(request):
        return Route.DUPLEX
    if request.path == settings.static_page_path:
        return Route.STATIC_PAGE
    if request.path == settings.stream_path:
        return Route.PUSH_STREAM
    return Route.PLAIN
