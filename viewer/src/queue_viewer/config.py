from __future__ import annotations

import urllib.parse
from dataclasses import dataclass

WS_PATH = "/ws"
RECONNECT_INTERVAL_S = 5.0
DEFAULT_ORIGIN = "http://localhost"

_SCHEME_UPGRADES = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


def endpoint_from_origin(origin: str, path: str = WS_PATH) -> str:
    """Return the WebSocket endpoint served next to ``origin``.

    The scheme is upgraded to its streaming counterpart (``http`` to ``ws``,
    ``https`` to ``wss``), host and port are kept and the path is replaced by
    ``path``. Query and fragment are dropped.
    """

    parsed = urllib.parse.urlsplit(origin.strip())
    scheme = _SCHEME_UPGRADES.get(parsed.scheme.lower())
    if scheme is None:
        raise ValueError(f"unsupported origin scheme: {parsed.scheme or '<none>'}")
    if not parsed.netloc:
        raise ValueError(f"origin has no host: {origin}")
    if not path.startswith("/"):
        path = "/" + path
    return urllib.parse.urlunsplit((scheme, parsed.netloc, path, "", ""))


@dataclass(frozen=True)
class ViewerConfig:
    origin: str = DEFAULT_ORIGIN
    ws_path: str = WS_PATH
    reconnect_interval_s: float = RECONNECT_INTERVAL_S
    heartbeat_s: float | None = None

    @property
    def endpoint(self) -> str:
        return endpoint_from_origin(self.origin, self.ws_path)
