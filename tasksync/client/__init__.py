"""Sync client: keeps a local task collection converged with the server.

TaskSyncSession is the entry point; it owns a TaskReconciler (the local
collection), a TaskApiClient (HTTP mutations and full fetches) and a
BroadcastListener (WebSocket change events with bounded reconnect).
"""

from tasksync.client.api import TaskApiClient
from tasksync.client.channel import BroadcastListener
from tasksync.client.reconciler import ApplyOutcome, TaskReconciler, TaskStats
from tasksync.client.session import TaskSyncSession

__all__ = [
    "ApplyOutcome",
    "BroadcastListener",
    "TaskApiClient",
    "TaskReconciler",
    "TaskStats",
    "TaskSyncSession",
]
