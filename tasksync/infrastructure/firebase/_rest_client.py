"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1. All HTTP
calls use httpx.AsyncClient so they do not block the event loop. Passing
credentials=None skips the Authorization header (Firestore emulator).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from tasksync.infrastructure.firebase._rest_encoding import (
    decode_fields,
    encode_fields,
    encode_value,
)

FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"

_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
}


def get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class DocumentExistsError(Exception):
    """Raised when createDocument returns 409 (document ID already exists)."""


class PreconditionFailedError(Exception):
    """Raised when a commit precondition such as updateTime no longer holds."""


@dataclass(frozen=True)
class DocumentSnapshot:
    """Snapshot of a document (id + decoded fields + server updateTime)."""

    id: str
    data: dict[str, Any]
    update_time: str | None = None

    @classmethod
    def from_rest(cls, doc: dict) -> DocumentSnapshot:
        name = doc.get("name", "")
        return cls(
            name.split("/")[-1] if name else "",
            decode_fields(doc.get("fields")),
            doc.get("updateTime"),
        )


def _error_status(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    return error.get("status") if isinstance(error, dict) else None


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    resp = await client.request(method, url, headers=headers, json=body)
    if resp.status_code == 404:
        return None
    if resp.status_code == 409:
        raise DocumentExistsError("Document already exists")
    if resp.status_code == 400 and _error_status(resp) == "FAILED_PRECONDITION":
        raise PreconditionFailedError(resp.text)
    resp.raise_for_status()
    return resp.json() if resp.content else {}


class FirestoreRESTClient:
    """Lightweight Firestore client using the REST API (documents, commit, runQuery)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = FIRESTORE_BASE_URL,
    ) -> None:
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self.database = f"projects/{project_id}/databases/(default)"
        self.documents_path = f"{self.database}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        if self._credentials is None:
            return None
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def document_name(self, collection_id: str, document_id: str) -> str:
        """Full resource name used by commit writes."""
        return f"{self.documents_path}/{collection_id}/{document_id}"

    async def _call(self, path: str, method: str = "GET", body: dict | None = None) -> Any:
        return await _request_async(
            self._http,
            f"{self._base_url}/{path}",
            method=method,
            body=body,
            access_token=await self.get_token(),
        )

    async def get_document(
        self, collection_id: str, document_id: str
    ) -> DocumentSnapshot | None:
        """Fetch a document; None if it does not exist."""
        out = await self._call(self.document_name(collection_id, document_id))
        if not out:
            return None
        return DocumentSnapshot.from_rest(out)

    async def create_document(
        self, collection_id: str, document_id: str, data: dict[str, Any]
    ) -> DocumentSnapshot:
        """Create a document with the given ID (DocumentExistsError if it exists)."""
        path = (
            f"{self.documents_path}/{collection_id}"
            f"?documentId={quote(document_id, safe='')}"
        )
        out = await self._call(path, method="POST", body={"fields": encode_fields(data)})
        return DocumentSnapshot.from_rest(out)

    async def commit(self, writes: list[dict[str, Any]]) -> dict | None:
        """Apply writes atomically. None when a precondition fails with NOT_FOUND."""
        return await self._call(
            f"{self.documents_path}:commit", method="POST", body={"writes": writes}
        )

    async def run_query(
        self,
        collection_id: str,
        *,
        filters: list[tuple[str, str, Any]] | None = None,
        order_by: tuple[str, str] | None = None,
        limit: int | None = None,
    ) -> list[DocumentSnapshot]:
        """Run a structured query; filters are ANDed (field, op, value) triples."""
        structured: dict[str, Any] = {"from": [{"collectionId": collection_id}]}
        field_filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": _OP_MAP.get(op, op),
                    "value": encode_value(value),
                }
            }
            for field, op, value in filters or []
        ]
        if len(field_filters) == 1:
            structured["where"] = field_filters[0]
        elif field_filters:
            structured["where"] = {
                "compositeFilter": {"op": "AND", "filters": field_filters}
            }
        if order_by is not None:
            field, direction = order_by
            structured["orderBy"] = [
                {"field": {"fieldPath": field}, "direction": direction}
            ]
        if limit:
            structured["limit"] = limit
        resp = await self._call(
            f"{self.documents_path}:runQuery",
            method="POST",
            body={"structuredQuery": structured},
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        return [
            DocumentSnapshot.from_rest(item["document"])
            for item in items
            if "document" in item
        ]
