"""WebSocket connection manager (the server side of the broadcast channel).

Used by the WebSocket endpoint and the change notifier.
"""

from tasksync.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
