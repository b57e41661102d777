"""Data models for the echo server."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ServerIdentity(BaseModel):
    """Host identity of this server, resolved for a single request."""

    hostname: Annotated[str | None, Field(description="Server host name, if known")] = None
    error: Annotated[str | None, Field(description="Why the host name is unknown")] = None
    disclose: Annotated[bool, Field(description="Whether the host name may be revealed")] = True

    @property
    def greeting(self) -> str:
        """Introductory text sent when a WebSocket channel opens."""
        if not self.disclose:
            return ""
        if self.hostname is not None:
            return f"Request served by {self.hostname}"
        return f"Server hostname unknown: {self.error}"


class DuplexMessage(BaseModel):
    """A data message received on (and echoed back over) a WebSocket."""

    kind: Annotated[Literal["text", "binary"], Field(description="Message type")]
    payload: Annotated[str | bytes, Field(description="Message payload")]

    @property
    def size(self) -> int:
        if isinstance(self.payload, str):
            return len(self.payload.encode("utf-8"))
        return len(self.payload)


class StreamEvent(BaseModel):
    """A single Server-Sent Event."""

    id: Annotated[int, Field(ge=1, description="Event id, unique within one stream")]
    event: Annotated[str, Field(description="Event label")]
    data: Annotated[str, Field(description="Event data, may span several lines")]


class EchoPayload(BaseModel):
    """Body echoed back for plain requests and the stream ``request`` event."""

    access_token: Annotated[str, Field(description="Canned token")] = "fake-token"
    gtins: Annotated[list[str], Field(description="Canned item list")] = ["999"]
    changes_until: Annotated[
        str, Field(serialization_alias="changesUntil", description="Canned timestamp")
    ] = "2020-12-12T00:00:11.111Z"
    method: Annotated[str, Field(description="HTTP method")]
    path: Annotated[str, Field(description="Request path")]
    query: Annotated[str, Field(description="Query string")] = ""
    version: Annotated[str, Field(description="HTTP version, e.g. HTTP/1.1")]
    host: Annotated[str, Field(description="Host the request was addressed to")] = ""
    remote: Annotated[str | None, Field(description="Client address")] = None
    headers: Annotated[
        list[tuple[str, str]], Field(description="Request headers in arrival order")
    ] = []

    def render(self) -> str:
        return self.model_dump_json(by_alias=True)
