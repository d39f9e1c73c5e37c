"""Session-scoped wiring of transport, codec, replica and dispatcher."""

from __future__ import annotations

import asyncio

import aiohttp

from .codec import decode_frame
from .config import ViewerConfig
from .connection import ConnectionManager, SleepFunc
from .dispatcher import ActionDispatcher
from .store import ReplicaStore


class ViewerSession:
    """Owns the single transport and the single replica of one viewer.

    A fresh connection resets the replica to empty; the server is not assumed
    to push a ``sync`` after reconnecting, so readers must treat the state as
    stale until one arrives.
    """

    def __init__(
        self,
        config: ViewerConfig | None = None,
        *,
        http_session: aiohttp.ClientSession | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self.config = config or ViewerConfig()
        self.store = ReplicaStore()
        self.connection = ConnectionManager(
            self.config.endpoint,
            on_frame=self.handle_frame,
            on_open=self._handle_open,
            reconnect_interval_s=self.config.reconnect_interval_s,
            heartbeat_s=self.config.heartbeat_s,
            http_session=http_session,
            sleep=sleep or asyncio.sleep,
        )
        self.dispatcher = ActionDispatcher(self.connection)
        self.connections_opened = 0

    def _handle_open(self) -> None:
        self.connections_opened += 1
        if not self.store.is_empty:
            self.store.reset()

    def handle_frame(self, text: str) -> None:
        event = decode_frame(text)
        if event is None:
            return
        self.store.apply(event)

    async def start(self) -> None:
        await self.connection.start()

    async def close(self) -> None:
        await self.connection.close()

    async def __aenter__(self) -> "ViewerSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
