"""Firestore (REST API) document store for tasks."""

from tasksync.infrastructure.firebase._rest_client import FirestoreRESTClient
from tasksync.infrastructure.firebase.client import create_firestore_client
from tasksync.infrastructure.firebase.repositories import FirestoreTaskRepository

__all__ = [
    "FirestoreRESTClient",
    "FirestoreTaskRepository",
    "create_firestore_client",
]
