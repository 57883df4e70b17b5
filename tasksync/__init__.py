"""tasksync: task service with real-time WebSocket sync and a reconciling client."""

__version__ = "1.0.0"
