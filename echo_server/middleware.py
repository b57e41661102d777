"""Request logging middleware."""

from aiohttp import web
from aiohttp.typedefs import Handler

from .config import Settings
from .observer import ExchangeObserver


def request_logging_middleware(settings: Settings, observer: ExchangeObserver):
    """Log every request line, and optionally its headers and a body hex dump.

    The body is read through ``request.read()``, which keeps the bytes on the
    request so handlers that read it later get the same content. Bodies over
    the application's ``client_max_size`` are not dumped; the request still
    reaches the handler.
    """
    verbose = settings.log_http_headers or settings.log_http_body

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        remote = request.remote
        observer.request_received(remote, request.method, request.path_qs, verbose=verbose)

        if settings.log_http_headers:
            observer.request_headers(remote, request.headers.items())

        if settings.log_http_body and request.can_read_body:
            try:
                body = await request.read()
            except web.HTTPRequestEntityTooLarge as exc:
                observer.request_body_skipped(remote, exc)
            else:
                if body:
                    observer.request_body(remote, body)

        return await handler(request)

    return middleware
