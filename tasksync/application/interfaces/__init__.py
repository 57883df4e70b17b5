"""Application interfaces (ports): repository and notifier protocols."""

from tasksync.application.interfaces.repositories import ITaskRepository
from tasksync.application.interfaces.services import IChangeNotifier

__all__ = ["IChangeNotifier", "ITaskRepository"]
