"""Server identity and the per-request disclosure policy."""

import socket
from collections.abc import Callable, Mapping

from .config import Settings
from .models import ServerIdentity

DISCLOSE_HEADER = "X-Send-Server-Hostname"


class IdentityProvider:
    """Resolves the server identity for each request.

    The host name comes from ``hostname`` (``socket.gethostname`` by default).
    Disclosure defaults to ``settings.send_server_hostname`` and can be
    overridden per request with the ``X-Send-Server-Hostname`` header. Only
    the literal ``false`` (any case) turns disclosure off.
    """

    def __init__(
        self,
        settings: Settings,
        hostname: Callable[[], str] = socket.gethostname,
    ) -> None:
        self._settings = settings
        self._hostname = hostname

    def should_disclose(self, headers: Mapping[str, str]) -> bool:
        value = self._settings.send_server_hostname
        override = headers.get(DISCLOSE_HEADER)
        if override:
            value = override
        return value.casefold() != "false"

    def resolve(self, headers: Mapping[str, str]) -> ServerIdentity:
        """Build the identity for a request with the given headers."""
        disclose = self.should_disclose(headers)
        try:
            return ServerIdentity(hostname=self._hostname(), disclose=disclose)
        except OSError as exc:
            return ServerIdentity(error=str(exc), disclose=disclose)
