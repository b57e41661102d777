"""Server-Sent Events encoding and per-stream id sequencing."""

from collections.abc import Iterator

from .models import StreamEvent


class EventSequencer:
    """Hands out event ids for one stream: 1, 2, 3, ..."""

    def __init__(self) -> None:
        self._last_id = 0

    def next_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def make_event(self, event: str, data: str) -> StreamEvent:
        return StreamEvent(id=self.next_id(), event=event, data=data)


def iter_fields(event: StreamEvent) -> Iterator[tuple[str, str]]:
    """Yield ``(field, line)`` pairs in wire order.

    Values containing line breaks become one field line per input line.
    """
    for key, value in (("event", event.event), ("data", event.data), ("id", str(event.id))):
        for line in value.split("\n"):
            yield key, line


def format_field(key: str, line: str) -> str:
    return f"{key}: {line}\n"


def encode_event(event: StreamEvent) -> bytes:
    """Encode an event including the trailing blank line."""
    text = "".join(format_field(key, line) for key, line in iter_fields(event))
    return (text + "\n").encode("utf-8")
