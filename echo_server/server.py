"""
Echo Server - HTTP, WebSocket and SSE diagnostics
Echoes requests back so proxies and clients can be checked for fidelity.
"""

import asyncio
import logging
import random
from collections.abc import Callable
from datetime import datetime

import aiohttp_jinja2
import jinja2
import uvloop
from aiohttp import web

from .config import Settings, get_settings
from .handlers import RequestHandlers
from .identity import IdentityProvider
from .logging import setup_logging
from .middleware import request_logging_middleware
from .observer import ExchangeObserver
from .stream import local_now

logger = logging.getLogger(__name__)


class EchoServer:
    """Main server class wiring settings and collaborators into the application."""

    def __init__(
        self,
        settings: Settings | None = None,
        identity: IdentityProvider | None = None,
        rng: random.Random | None = None,
        observer: ExchangeObserver | None = None,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self.settings = settings or get_settings()
        self.observer = observer or ExchangeObserver()
        self.handlers = RequestHandlers(
            self.settings,
            identity or IdentityProvider(self.settings),
            rng or random.Random(),
            self.observer,
            clock=clock,
        )

    def setup_routes(self, app: web.Application) -> None:
        """Configure application routes."""
        # Classification happens in the handler: an upgrade on any path wins.
        app.router.add_route("*", "/{tail:.*}", self.handlers.handle)

    def create_app(self) -> web.Application:
        """Create and configure the aiohttp application."""
        app = web.Application(
            middlewares=[request_logging_middleware(self.settings, self.observer)],
        )
        aiohttp_jinja2.setup(app, loader=jinja2.PackageLoader("echo_server", "templates"))
        self.setup_routes(app)
        app.on_shutdown.append(self.handlers.stop_streams)
        return app

    def make_runner(self, app: web.Application) -> web.AppRunner:
        """Build the runner; handler tasks are cancelled when their client disconnects."""
        return web.AppRunner(app, handler_cancellation=True)

    async def start(self) -> None:
        """Start the echo server."""
        runner = self.make_runner(self.create_app())
        await runner.setup()

        site = web.TCPSite(runner, self.settings.host, self.settings.port)
        await site.start()

        logger.info(f"Echo server listening on port {self.settings.port}.")

        # Keep running
        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()


def main() -> None:
    """Entry point for the server."""
    settings = get_settings()
    setup_logging(settings.log_level, access_log=settings.access_log)

    # Install uvloop as the default event loop
    uvloop.install()

    server = EchoServer(settings)

    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
