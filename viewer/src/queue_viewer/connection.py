from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import aiohttp
from aiohttp import WSMsgType

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def _noop() -> None:
    return None


class ConnectionManager:
    """Keeps at most one WebSocket open to ``endpoint`` and retries forever.

    A retry task wakes every ``reconnect_interval_s`` seconds and calls
    :meth:`connect` when no transport is active. There is no backoff and no
    attempt limit. Failures to connect and dropped connections look the same
    to callers: ``transport`` is ``None`` until the next successful attempt.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        on_frame: Callable[[str], None],
        on_open: Callable[[], None] = _noop,
        on_close: Callable[[], None] = _noop,
        reconnect_interval_s: float = 5.0,
        heartbeat_s: float | None = None,
        http_session: aiohttp.ClientSession | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.endpoint = endpoint
        self.reconnect_interval_s = reconnect_interval_s
        self._heartbeat_s = heartbeat_s
        self._on_frame = on_frame
        self._on_open = on_open
        self._on_close = on_close
        self._http_session = http_session
        self._owns_http_session = http_session is None
        self._sleep = sleep
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._connecting = False
        self._reader_task: asyncio.Task | None = None
        self._retry_task: asyncio.Task | None = None

    @property
    def transport(self) -> aiohttp.ClientWebSocketResponse | None:
        return self._ws

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    def _session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self._http_session

    async def connect(self) -> bool:
        """Open a transport unless one is already open or being opened."""

        if self._ws is not None or self._connecting:
            return False
        self._connecting = True
        try:
            ws = await self._session().ws_connect(self.endpoint, heartbeat=self._heartbeat_s)
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as exc:
            logger.debug("connect to %s failed: %s", self.endpoint, exc)
            return False
        finally:
            self._connecting = False

        self._ws = ws
        logger.info("connected to %s", self.endpoint)
        self._reader_task = asyncio.create_task(self._read_loop(ws))
        self._notify(self._on_open, "on_open")
        return True

    def _notify(self, callback: Callable[..., None], name: str, *args: object) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception("%s callback failed", name)

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type == WSMsgType.TEXT:
                    self._notify(self._on_frame, "on_frame", msg.data)
                elif msg.type == WSMsgType.ERROR:
                    logger.debug("transport error: %s", ws.exception())
                    break
                else:
                    logger.debug("ignoring %s frame", msg.type.name)
        except (aiohttp.ClientError, OSError) as exc:
            logger.debug("transport failed: %s", exc)
        finally:
            if self._ws is ws:
                self._ws = None
            if not ws.closed:
                await ws.close()
            logger.info("disconnected from %s", self.endpoint)
            self._notify(self._on_close, "on_close")

    async def send(self, text: str) -> bool:
        ws = self._ws
        if ws is None or ws.closed:
            return False
        try:
            await ws.send_str(text)
        except (aiohttp.ClientError, ConnectionResetError) as exc:
            logger.debug("send failed: %s", exc)
            return False
        return True

    async def _retry_loop(self) -> None:
        try:
            while True:
                await self._sleep(self.reconnect_interval_s)
                if self._ws is None:
                    try:
                        await self.connect()
                    except Exception:
                        logger.exception("reconnect to %s failed", self.endpoint)
        except asyncio.CancelledError:
            return

    async def start(self) -> None:
        await self.connect()
        if self._retry_task is None:
            self._retry_task = asyncio.create_task(self._retry_loop())

    async def close(self) -> None:
        if self._retry_task is not None:
            self._retry_task.cancel()
            try:
                await self._retry_task
            except asyncio.CancelledError:
                pass
            self._retry_task = None
        ws = self._ws
        if ws is not None:
            await ws.close()
        if self._reader_task is not None:
            await asyncio.gather(self._reader_task, return_exceptions=True)
            self._reader_task = None
        if self._owns_http_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
