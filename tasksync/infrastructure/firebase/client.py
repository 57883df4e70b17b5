"""Firestore client factory.

Builds the REST client from either FIREBASE_SERVICE_ACCOUNT_KEY (JSON
string) or FIREBASE_SERVICE_ACCOUNT_PATH (file path). Failure here is fatal
at startup: the lifespan lets StoreUnavailableException propagate.
"""

import json
import logging
from pathlib import Path

from tasksync.core.config import Settings
from tasksync.domain.exceptions import StoreUnavailableException
from tasksync.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    get_credentials,
)

logger = logging.getLogger(__name__)


def _load_key_dict(settings: Settings) -> dict:
    """Return service account dict from env key or file path."""
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise StoreUnavailableException(
                "firestore", "FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON"
            ) from e
    path = Path(settings.firebase_service_account_path or "").expanduser()
    if not path.is_file():
        raise StoreUnavailableException(
            "firestore", f"service account file not found: {path}"
        )
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def create_firestore_client(settings: Settings) -> FirestoreRESTClient:
    """Build the Firestore REST client from settings.

    Raises:
        StoreUnavailableException: credentials missing, malformed, or lacking project_id.
    """
    key_dict = _load_key_dict(settings)
    project_id = key_dict.get("project_id")
    if not project_id:
        raise StoreUnavailableException(
            "firestore", "service account JSON missing 'project_id'"
        )
    try:
        cred = get_credentials(key_dict)
    except ValueError as e:
        raise StoreUnavailableException("firestore", f"invalid service account: {e}") from e
    logger.info("Firestore client created for project %s", project_id)
    return FirestoreRESTClient(project_id, cred)
