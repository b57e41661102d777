"""Unbounded Server-Sent Events stream with a periodic heartbeat."""

import asyncio
from collections.abc import Callable
from datetime import datetime

from aiohttp import web

from .events import EventSequencer, encode_event, iter_fields
from .models import ServerIdentity
from .observer import ExchangeObserver


def local_now() -> datetime:
    return datetime.now().astimezone()


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 with second precision; a zero offset is written as ``Z``."""
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[: -len("+00:00")] + "Z"
    return text


def next_deadline(deadline: float, interval: float, now: float) -> float:
    """Advance a tick deadline by one interval.

    A deadline that has already passed is re-anchored at ``now``: one late
    tick fires at once and the missed ones are dropped, like a Go ticker.
    """
    deadline += interval
    if deadline < now:
        return now
    return deadline


class PushStream:
    """Emits events on one prepared response until the client goes away.

    Event order is fixed: ``server`` (only when the identity may be
    disclosed and is known), ``request``, then ``time`` once per interval.
    The heartbeat loop waits on two things at once, the next tick deadline
    and the stop signal, and exits only once the stop signal is set.

    The stop signal is set by ``stop()`` from outside the stream (server
    shutdown), by cancellation of the handler task (aiohttp cancels it when
    the client disconnects), or by a failed write.
    """

    def __init__(
        self,
        request: web.BaseRequest,
        response: web.StreamResponse,
        observer: ExchangeObserver,
        interval: float,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._request = request
        self._response = response
        self._observer = observer
        self._interval = interval
        self._clock = clock
        self._remote = request.remote
        self._sequencer = EventSequencer()
        self._stop_event = asyncio.Event()
        self.stop_reason: str | None = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self, reason: str) -> None:
        if self.stopped:
            return
        self.stop_reason = reason
        self._stop_event.set()
        self._observer.stream_stopped(self._remote, reason)

    def client_gone(self) -> bool:
        transport = self._request.transport
        return transport is None or transport.is_closing()

    async def send(self, event: str, data: str) -> None:
        """Write one event; a failed write stops the stream."""
        stream_event = self._sequencer.make_event(event, data)
        for key, line in iter_fields(stream_event):
            self._observer.stream_field(self._remote, key, line)

        try:
            # One write per event; aiohttp hands each chunk straight to the transport.
            await self._response.write(encode_event(stream_event))
        except ConnectionError as exc:
            self.stop(f"write failed: {exc}")
            return

        self._observer.stream_event(self._remote, stream_event)

    async def run(self, identity: ServerIdentity, echo: str) -> None:
        try:
            if identity.disclose and identity.hostname is not None:
                await self.send("server", identity.hostname)
            if not self.stopped:
                await self.send("request", echo)
            await self._heartbeat()
        except asyncio.CancelledError:
            self.stop("cancelled")
            raise

    async def _heartbeat(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time()

        while not self.stopped:
            deadline = next_deadline(deadline, self._interval, loop.time())
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=max(0.0, deadline - loop.time()),
                )
            except TimeoutError:
                if self.client_gone():
                    self.stop("client disconnected")
                    break
                await self.send("time", format_timestamp(self._clock()))
