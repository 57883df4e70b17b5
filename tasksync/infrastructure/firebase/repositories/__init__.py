"""Firestore-backed repositories."""

from tasksync.infrastructure.firebase.repositories.task_repo_firestore import (
    FirestoreTaskRepository,
)

__all__ = ["FirestoreTaskRepository"]
