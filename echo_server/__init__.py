"""Echo server for inspecting HTTP, WebSocket and Server-Sent Events traffic."""

__version__ = "0.1.0"
