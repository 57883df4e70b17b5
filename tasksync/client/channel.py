"""Client side of the broadcast channel.

BroadcastListener holds one WebSocket connection to /api/v1/ws and hands each
parsed change event to a callback. On a drop it reconnects with exponential
backoff; the attempt budget applies to consecutive failed connects and is
refilled by every successful one. When the budget runs out run() raises
TransportException.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Protocol

import websockets
from pydantic import ValidationError
from websockets.exceptions import WebSocketException

from tasksync.domain.exceptions import TransportException
from tasksync.schemas.events import ChangeEvent, parse_change_event

logger = logging.getLogger(__name__)

PONG = "pong"


class Connection(Protocol):
    """What the listener needs from a connection: frames in, close()."""

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...

    async def close(self) -> Any: ...


ConnectFactory = Callable[[str], Awaitable[Connection]]
EventHandler = Callable[[ChangeEvent], Any]
Hook = Callable[[], Any]


class BroadcastListener:
    """Receive change events with bounded automatic reconnection."""

    def __init__(
        self,
        url: str,
        on_event: EventHandler,
        *,
        on_connect: Hook | None = None,
        on_disconnect: Hook | None = None,
        reconnect_attempts: int = 5,
        reconnect_delay: float = 1.0,
        reconnect_delay_max: float = 5.0,
        reconnect_backoff: float = 2.0,
        open_timeout: float = 20.0,
        connect: ConnectFactory | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.url = url
        self._on_event = on_event
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect
        self.reconnect_attempts = reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self.reconnect_delay_max = reconnect_delay_max
        self.reconnect_backoff = reconnect_backoff
        self.open_timeout = open_timeout
        self._connect = connect or self._default_connect
        self._sleep = sleep
        self._connection: Connection | None = None
        self._closed = False
        self.connect_count = 0

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @property
    def is_stale(self) -> bool:
        """True while there is no live connection to receive events on."""
        return not self.connected

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based), capped at reconnect_delay_max."""
        delay = self.reconnect_delay * self.reconnect_backoff ** (attempt - 1)
        return min(delay, self.reconnect_delay_max)

    async def run(self) -> None:
        """Connect and dispatch events until close() or the retry budget is spent."""
        failures = 0
        while not self._closed:
            try:
                connection = await self._connect(self.url)
            except (OSError, TimeoutError, WebSocketException) as e:
                failures += 1
                if failures > self.reconnect_attempts:
                    logger.error(
                        "Giving up on %s after %d failed attempts", self.url, failures - 1
                    )
                    raise TransportException(
                        f"Broadcast channel unreachable after {failures - 1} retries: {e}",
                        retryable=False,
                    ) from e
                delay = self.backoff_delay(failures)
                logger.warning(
                    "Connect to %s failed (%s); retry %d/%d in %.1fs",
                    self.url,
                    e,
                    failures,
                    self.reconnect_attempts,
                    delay,
                )
                await self._sleep(delay)
                continue

            failures = 0
            self._connection = connection
            self.connect_count += 1
            logger.info("Broadcast channel connected: %s", self.url)
            try:
                await _call(self._on_connect)
                await self._consume(connection)
            except WebSocketException as e:
                logger.warning("Broadcast channel dropped: %s", e)
            finally:
                self._connection = None
                await connection.close()

            if self._closed:
                break
            await _call(self._on_disconnect)
            await self._sleep(self.backoff_delay(1))

    async def close(self) -> None:
        """Stop run() and close the live connection, if any."""
        self._closed = True
        if self._connection is not None:
            await self._connection.close()

    async def _consume(self, connection: Connection) -> None:
        async for frame in connection:
            if frame == PONG:
                continue
            try:
                event = parse_change_event(frame)
            except ValidationError as e:
                logger.warning("Skipping malformed event frame: %s", e)
                continue
            try:
                await _call(self._on_event, event)
            except Exception:
                logger.exception("Event handler failed on %s; listening continues", event.type)

    async def _default_connect(self, url: str) -> Connection:
        return await websockets.connect(url, open_timeout=self.open_timeout)


async def _call(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result
