"""Logging hooks invoked by the responders at well-defined points."""

import logging
from collections.abc import Iterable

from .models import DuplexMessage, StreamEvent

logger = logging.getLogger(__name__)


def hex_dump(data: bytes) -> str:
    """Render ``data`` like ``hexdump -C``: offset, 16 bytes, ASCII column."""
    lines = []
    for offset in range(0, len(data), 16):
        chunk = data[offset : offset + 16]
        hex_bytes = [f"{b:02x}" for b in chunk]
        left = " ".join(hex_bytes[:8]).ljust(23)
        right = " ".join(hex_bytes[8:]).ljust(23)
        text = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        lines.append(f"{offset:08x}  {left}  {right}  |{text}|")
    return "\n".join(lines)


class ExchangeObserver:
    """Default observer: writes one log line per observed step.

    Lines follow the ``<remote> | <what>`` shape so a single connection can
    be followed with grep. Subclass and override to capture events instead.
    """

    def request_received(self, remote: str | None, method: str, url: str, verbose: bool = False) -> None:
        prefix = "--------  " if verbose else ""
        logger.info(f"{prefix}{remote} | {method} {url}")

    def request_headers(self, remote: str | None, headers: Iterable[tuple[str, str]]) -> None:
        lines = "\n".join(f'"{name}" : "{value}"' for name, value in headers)
        logger.info(f"{remote} | Headers\n{lines}")

    def request_body(self, remote: str | None, body: bytes) -> None:
        logger.info(f"{remote} | Body ({len(body)} byte(s))\n{hex_dump(body)}")

    def request_body_skipped(self, remote: str | None, exc: Exception) -> None:
        logger.info(f"{remote} | Body not dumped: {exc}")

    def plain_responded(self, remote: str | None, status: int) -> None:
        logger.info(f"{remote} | return {status}")

    def websocket_handshake_failed(self, remote: str | None, exc: Exception) -> None:
        logger.warning(f"{remote} | websocket handshake failed: {exc}")

    def websocket_upgraded(self, remote: str | None) -> None:
        logger.info(f"{remote} | upgraded to websocket")

    def message_echoed(self, remote: str | None, message: DuplexMessage) -> None:
        if message.kind == "text":
            logger.info(f"{remote} | txt | {message.payload}")
        else:
            logger.info(f"{remote} | bin | {message.size} byte(s)")

    def websocket_closed(self, remote: str | None, code: int | None) -> None:
        logger.info(f"{remote} | websocket closed (code {code})")

    def websocket_error(self, remote: str | None, exc: BaseException | None) -> None:
        logger.error(f"{remote} | {exc}")

    def stream_unsupported(self, remote: str | None) -> None:
        logger.error(f"{remote} | streaming unsupported")

    def stream_field(self, remote: str | None, key: str, line: str) -> None:
        logger.info(f"{remote} | sse | {key}: {line}")

    def stream_event(self, remote: str | None, event: StreamEvent) -> None:
        logger.debug(f"{remote} | sse | event {event.id} flushed")

    def stream_stopped(self, remote: str | None, reason: str) -> None:
        logger.info(f"{remote} | sse | stream stopped: {reason}")
