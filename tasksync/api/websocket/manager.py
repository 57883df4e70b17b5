"""WebSocket connection manager.

Every connection joins the default group; a client may also declare one named
group at connect time. Use via app.state.ws_manager (set in create_app).

Task change events always go through broadcast(), which reaches each
connection exactly once regardless of group membership. broadcast_to_group()
is for targeted messages and never carries task events.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections with optional named groups.

    - Tracks all connections plus membership per named group.
    - broadcast() sends to every connection once; broadcast_to_group() to members only.
    - Connection bookkeeping is lock-protected; sends happen outside the lock.
    """

    def __init__(self) -> None:
        """Initialize with no connections."""
        self._connections: set[WebSocket] = set()
        self._connections_by_group: dict[str, set[WebSocket]] = {}
        self._websocket_to_group: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, group: str | None = None) -> None:
        """Accept and register a new connection.

        Args:
            websocket: The WebSocket instance to accept and track.
            group: Optional client-declared group name.
        """
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)
            if group:
                self._connections_by_group.setdefault(group, set()).add(websocket)
                self._websocket_to_group[websocket] = group
        logger.debug("WebSocket connected (group=%s)", group)

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection (call on disconnect). Unknown connections are ignored."""
        async with self._lock:
            self._discard(websocket)

    def _discard(self, websocket: WebSocket) -> None:
        """Drop a connection from all indexes. Caller holds the lock."""
        self._connections.discard(websocket)
        group = self._websocket_to_group.pop(websocket, None)
        if group and group in self._connections_by_group:
            conns = self._connections_by_group[group]
            conns.discard(websocket)
            if not conns:
                del self._connections_by_group[group]

    async def broadcast(self, message: str | dict[str, Any]) -> int:
        """Send a message to every connected client exactly once.

        Returns:
            Number of connections the message was delivered to.
        """
        async with self._lock:
            snapshot = list(self._connections)
        return await self._send_to_list(snapshot, message)

    async def broadcast_to_group(
        self, group: str, message: str | dict[str, Any]
    ) -> int:
        """Send a message to all connections in the given named group."""
        async with self._lock:
            snapshot = list(self._connections_by_group.get(group, set()))
        return await self._send_to_list(snapshot, message)

    async def _send_to_list(
        self,
        connections: list[WebSocket],
        message: str | dict[str, Any],
    ) -> int:
        """Send message to a list of connections; remove dead ones under lock."""
        dead: list[WebSocket] = []
        for ws in connections:
            try:
                if isinstance(message, dict):
                    await ws.send_json(message)
                else:
                    await ws.send_text(message)
            except Exception:
                logger.debug("Dropping dead WebSocket connection", exc_info=True)
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    self._discard(ws)
        return len(connections) - len(dead)

    async def get_connection_count(self) -> int:
        """Return the total number of active connections (lock-safe)."""
        async with self._lock:
            return len(self._connections)

    async def get_group_count(self, group: str) -> int:
        """Return the number of connections in a named group."""
        async with self._lock:
            return len(self._connections_by_group.get(group, set()))
