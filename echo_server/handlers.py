"""HTTP, WebSocket and event stream request handlers."""

import random
from collections.abc import Callable
from datetime import datetime

import aiohttp_jinja2
from aiohttp import WSMsgType, web

from .classifier import Route, classify
from .config import Settings
from .identity import IdentityProvider
from .models import DuplexMessage, EchoPayload, ServerIdentity
from .observer import ExchangeObserver
from .stream import PushStream, local_now

STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
}


def build_echo_payload(request: web.BaseRequest) -> EchoPayload:
    """Describe the request in the body echoed back to the client."""
    return EchoPayload(
        method=request.method,
        path=request.path,
        query=request.query_string,
        version=f"HTTP/{request.version.major}.{request.version.minor}",
        host=request.host,
        remote=request.remote,
        headers=list(request.headers.items()),
    )


class RequestHandlers:
    """Request handlers for the echo server.

    Every request goes through ``handle``, which classifies it and hands it to
    exactly one responder. Responders share only read-only collaborators and
    the set of open event streams, which shutdown uses to stop them.
    """

    def __init__(
        self,
        settings: Settings,
        identity: IdentityProvider,
        rng: random.Random,
        observer: ExchangeObserver,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self.settings = settings
        self.identity = identity
        self.rng = rng
        self.observer = observer
        self.clock = clock
        self.streams: set[PushStream] = set()

    async def handle(self, request: web.Request) -> web.StreamResponse:
        """Dispatch a request to the matching responder."""
        route = classify(request, self.settings)

        if route is Route.DUPLEX:
            return await self.handle_websocket(request, self.identity.resolve(request.headers))
        if route is Route.STATIC_PAGE:
            return await self.handle_page(request)
        if route is Route.PUSH_STREAM:
            return await self.handle_stream(request, self.identity.resolve(request.headers))
        return await self.handle_plain(request)

    async def handle_plain(self, request: web.Request) -> web.Response:
        """Echo the request as JSON with a random 200 or 403 status."""
        status = 403 if self.rng.getrandbits(1) else 200
        self.observer.plain_responded(request.remote, status)

        return web.Response(
            text=build_echo_payload(request).render(),
            status=status,
            content_type="application/json",
        )

    async def handle_websocket(
        self, request: web.Request, identity: ServerIdentity
    ) -> web.WebSocketResponse:
        """Upgrade to a WebSocket, greet, then echo every message back."""
        remote = request.remote
        ws = web.WebSocketResponse()

        try:
            await ws.prepare(request)
        except web.HTTPException as exc:
            self.observer.websocket_handshake_failed(remote, exc)
            raise

        self.observer.websocket_upgraded(remote)

        try:
            await ws.send_str(identity.greeting)

            while True:
                msg = await ws.receive()

                if msg.type == WSMsgType.TEXT:
                    message = DuplexMessage(kind="text", payload=msg.data)
                    await ws.send_str(msg.data)
                elif msg.type == WSMsgType.BINARY:
                    message = DuplexMessage(kind="binary", payload=msg.data)
                    await ws.send_bytes(msg.data)
                elif msg.type == WSMsgType.ERROR:
                    self.observer.websocket_error(remote, ws.exception())
                    break
                else:
                    self.observer.websocket_closed(remote, ws.close_code)
                    break

                self.observer.message_echoed(remote, message)
        except ConnectionError as exc:
            self.observer.websocket_error(remote, exc)
        finally:
            await ws.close()

        return ws

    async def handle_stream(
        self, request: web.Request, identity: ServerIdentity
    ) -> web.StreamResponse:
        """Serve the event stream until the client disconnects.

        aiohttp can always flush a ``StreamResponse``, so the only way a
        stream cannot start is a connection that is already gone or closing
        by the time the handler runs. That case gets ``500 Streaming
        unsupported!`` and no stream.
        """
        if request.transport is None or request.transport.is_closing():
            self.observer.stream_unsupported(request.remote)
            return web.Response(text="Streaming unsupported!", status=500)

        echo = build_echo_payload(request).render()

        response = web.StreamResponse(headers=STREAM_HEADERS)
        await response.prepare(request)

        stream = PushStream(
            request,
            response,
            self.observer,
            interval=self.settings.stream_interval,
            clock=self.clock,
        )
        self.streams.add(stream)
        try:
            await stream.run(identity, echo)
        finally:
            self.streams.discard(stream)

        return response

    async def stop_streams(self, app: web.Application) -> None:
        """Stop every open event stream; registered as a shutdown hook."""
        for stream in list(self.streams):
            stream.stop("server shutdown")

    async def handle_page(self, request: web.Request) -> web.Response:
        """Return the browser test page."""
        return aiohttp_jinja2.render_template(
            "index.html",
            request,
            {
                "host": request.host,
                "stream_path": self.settings.stream_path,
                "static_page_path": self.settings.static_page_path,
            },
        )
