"""Messaging: change notifications pushed to WebSocket subscribers."""

from tasksync.infrastructure.messaging.change_notifier import ChangeNotifier

__all__ = ["ChangeNotifier"]
