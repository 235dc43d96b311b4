"""Minimal async Firestore REST v1 client for the data driver.

Only what the driver needs: get, create, masked update and conditional
delete of single records, plus structured queries. Every call goes
through FirestoreRESTClient._send, which adds the bearer token (refreshed
with google-auth off the event loop) and maps status codes:
404 -> None, 409 -> DocumentExistsError, other errors -> httpx.HTTPStatusError.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, replace
from typing import Any

import httpx

from docsync.infrastructure.firebase._rest_encoding import (
    decode_document,
    encode_document,
    encode_value,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"

# QueryFilter operator -> structuredQuery FieldFilter.Operator
_FIELD_OPERATORS: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array-contains": "ARRAY_CONTAINS",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


def _get_credentials(key_dict: dict):
    """Service account credentials scoped to Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    if not credentials.valid:
        # google-auth's refresh is blocking; callers run this in a thread
        from google.auth.transport.requests import Request

        credentials.refresh(Request())
    return credentials.token


class DocumentExistsError(Exception):
    """createDocument answered 409: the record id is taken."""


@dataclass(frozen=True)
class DocumentSnapshot:
    id: str
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return self.data


class DocumentReference:
    """One record, addressed by its full resource path."""

    def __init__(self, client: FirestoreRESTClient, path: str) -> None:
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    async def get(self) -> DocumentSnapshot | None:
        out = await self._client._send("GET", self._path)
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out.get("fields")))

    async def update(self, data: dict[str, Any]) -> bool:
        """Overwrite only the given top-level fields; False when the record is missing."""
        params = [("updateMask.fieldPaths", name) for name in data]
        params.append(("currentDocument.exists", "true"))
        out = await self._client._send(
            "PATCH", self._path, params=params, body=encode_document(data)
        )
        return out is not None

    async def delete(self, must_exist: bool = False) -> bool:
        """Delete the record.

        Firestore deletes are idempotent; with must_exist=True a missing
        record makes this return False.
        """
        params = [("currentDocument.exists", "true")] if must_exist else None
        out = await self._client._send("DELETE", self._path, params=params)
        return out is not None


@dataclass(frozen=True)
class _Query:
    """Immutable structured query over one Firestore collection (filters ANDed)."""

    client: FirestoreRESTClient
    parent: str
    collection_id: str
    filters: tuple[tuple[str, str, Any], ...] = ()
    order: tuple[str, str] | None = None
    skip: int = 0
    max_results: int | None = None

    def where(self, field_path: str, op: str, value: Any) -> _Query:
        if op not in _FIELD_OPERATORS:
            raise ValueError(f"Unsupported query operator: {op!r}")
        return replace(self, filters=(*self.filters, (field_path, op, value)))

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> _Query:
        return replace(self, order=(field_path, direction))

    def offset(self, n: int) -> _Query:
        return replace(self, skip=n)

    def limit(self, n: int | None) -> _Query:
        return replace(self, max_results=n)

    def to_structured_query(self) -> dict[str, Any]:
        """runQuery `structuredQuery` body."""
        structured: dict[str, Any] = {"from": [{"collectionId": self.collection_id}]}
        clauses = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field_path},
                    "op": _FIELD_OPERATORS[op],
                    "value": encode_value(value),
                }
            }
            for field_path, op, value in self.filters
        ]
        if len(clauses) == 1:
            structured["where"] = clauses[0]
        elif clauses:
            structured["where"] = {"compositeFilter": {"op": "AND", "filters": clauses}}
        if self.order is not None:
            field_path, direction = self.order
            structured["orderBy"] = [
                {"field": {"fieldPath": field_path}, "direction": direction}
            ]
        if self.skip:
            structured["offset"] = self.skip
        if self.max_results is not None:
            structured["limit"] = self.max_results
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Run the query; yields one snapshot per matched record."""
        rows = await self.client._send(
            "POST",
            f"{self.parent}:runQuery",
            body={"structuredQuery": self.to_structured_query()},
        )
        # runQuery answers with a list; rows without "document" only carry readTime
        for row in rows or []:
            doc = row.get("document")
            if doc is None:
                continue
            doc_id = doc.get("name", "").rsplit("/", 1)[-1]
            yield DocumentSnapshot(doc_id, decode_document(doc.get("fields")))


class CollectionReference:
    """One Firestore collection, addressed by its full resource path."""

    def __init__(self, client: FirestoreRESTClient, path: str) -> None:
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a record under this id; DocumentExistsError when it is taken."""
        await self._client._send(
            "POST",
            self._path,
            params={"documentId": document_id},
            body=encode_document(data),
        )

    def query(self) -> _Query:
        parent, collection_id = self._path.rsplit("/", 1)
        return _Query(self._client, parent, collection_id)

    def where(self, field_path: str, op: str, value: Any) -> _Query:
        return self.query().where(field_path, op, value)


class FirestoreRESTClient:
    """Firestore REST client for one project's default database.

    Owns its httpx.AsyncClient unless one is injected; aclose() only
    closes an owned client.
    """

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.project_id = project_id
        self._credentials = credentials
        self._prefix = f"projects/{project_id}/databases/(default)/documents"
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Current access token, refreshed in a worker thread when expired."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        token = await self.get_token()
        response = await self._http.request(
            method,
            f"{_BASE}/{path}",
            params=params,
            json=body,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code == 404:
            return None
        if response.status_code == 409:
            raise DocumentExistsError(f"Record already exists: {path}")
        response.raise_for_status()
        if method == "DELETE" or not response.content:
            return {}
        return response.json()
