"""Firestore-backed data driver (implements IDataDriver).

The tree is stored flat: one Firestore collection holds collection
records and another holds documents, each keyed by id and carrying a
parent_id field. Children and documents of a node are server-side
`parent_id ==` queries.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx
from google.auth.exceptions import GoogleAuthError

from docsync.application.interfaces import DriverResult
from docsync.core.constants import KEY_FIELD
from docsync.domain.entities import CollectionRecord, DataDocument, JSONValue
from docsync.domain.exceptions import (
    CollectionNotFoundException,
    DocSyncException,
    DocumentNotFoundException,
    RecordAlreadyExistsException,
)
from docsync.domain.value_objects import QueryModel
from docsync.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    DocumentSnapshot,
    FirestoreRESTClient,
)
from docsync.infrastructure.firebase.collections import (
    COLLECTION_COLLECTIONS,
    COLLECTION_DOCUMENTS,
    FIELD_KEY,
    FIELD_NAME,
    FIELD_PARENT_ID,
    FIELD_VALUE,
)

logger = logging.getLogger(__name__)


def _value_field(field_path: str) -> str:
    """Firestore field path for a query field (dotted path inside value)."""
    if field_path == KEY_FIELD:
        return FIELD_KEY
    return f"{FIELD_VALUE}.{field_path}"


def _to_record(snapshot: DocumentSnapshot) -> CollectionRecord:
    data = snapshot.to_dict()
    return CollectionRecord.from_dict({"id": snapshot.id, **data})


def _to_document(snapshot: DocumentSnapshot) -> DataDocument:
    data = snapshot.to_dict()
    return DataDocument.from_dict({"id": snapshot.id, **data})


class FirestoreDataDriver:
    """Driver using the Firestore REST client. Same contract as InMemoryDataDriver."""

    def __init__(
        self,
        client: FirestoreRESTClient,
        collections_name: str = COLLECTION_COLLECTIONS,
        documents_name: str = COLLECTION_DOCUMENTS,
    ) -> None:
        self._client = client
        self._collections = client.collection(collections_name)
        self._documents = client.collection(documents_name)

    async def get_collection(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            if await self._collections.document(collection_id).get() is None:
                raise CollectionNotFoundException(collection_id)
            return DriverResult.ok()

        return await self._run("get_collection", op)

    async def create_collection(self, record: CollectionRecord) -> DriverResult:
        async def op() -> DriverResult:
            try:
                await self._collections.create(record.id, {
                    FIELD_NAME: record.name,
                    FIELD_PARENT_ID: record.parent_id,
                })
            except DocumentExistsError:
                raise RecordAlreadyExistsException("Collection", record.id) from None
            return DriverResult.ok()

        return await self._run("create_collection", op)

    async def get_sub_collections(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            q = self._collections.where(FIELD_PARENT_ID, "==", collection_id)
            records = [_to_record(s) async for s in q.stream()]
            return DriverResult.ok(sub_collections=records)

        return await self._run("get_sub_collections", op)

    async def get_documents(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            q = self._documents.where(FIELD_PARENT_ID, "==", collection_id)
            docs = [_to_document(s) async for s in q.stream()]
            return DriverResult.ok(docs=docs)

        return await self._run("get_documents", op)

    async def delete_collection(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            deleted = await self._collections.document(collection_id).delete(must_exist=True)
            if not deleted:
                raise CollectionNotFoundException(collection_id)
            return DriverResult.ok()

        return await self._run("delete_collection", op)

    async def create_document(self, document: DataDocument) -> DriverResult:
        async def op() -> DriverResult:
            try:
                await self._documents.create(document.id, {
                    FIELD_PARENT_ID: document.parent_id,
                    FIELD_KEY: document.key,
                    FIELD_VALUE: document.value,
                })
            except DocumentExistsError:
                raise RecordAlreadyExistsException("Document", document.id) from None
            return DriverResult.ok()

        return await self._run("create_document", op)

    async def update_document(self, document_id: str, value: JSONValue) -> DriverResult:
        async def op() -> DriverResult:
            updated = await self._documents.document(document_id).update({FIELD_VALUE: value})
            if not updated:
                raise DocumentNotFoundException(document_id)
            return DriverResult.ok()

        return await self._run("update_document", op)

    async def delete_document(self, document_id: str) -> DriverResult:
        async def op() -> DriverResult:
            deleted = await self._documents.document(document_id).delete(must_exist=True)
            if not deleted:
                raise DocumentNotFoundException(document_id)
            return DriverResult.ok()

        return await self._run("delete_document", op)

    async def query_documents(
        self, collection_id: str, query: QueryModel
    ) -> DriverResult:
        async def op() -> DriverResult:
            q = self._documents.where(FIELD_PARENT_ID, "==", collection_id)
            for flt in query.filters:
                q = q.where(_value_field(flt.field), flt.op, flt.value)
            if query.order_by:
                q = q.order_by(_value_field(query.order_by), query.direction)
            q = q.offset(query.offset).limit(query.limit)
            docs = [_to_document(s) async for s in q.stream()]
            return DriverResult.ok(docs=docs)

        return await self._run("query_documents", op)

    async def _run(
        self, operation: str, op: Callable[[], Awaitable[DriverResult]]
    ) -> DriverResult:
        """Run op, mapping domain, HTTP and credential failures to DriverResult.fail."""
        try:
            return await op()
        except DocSyncException as e:
            return DriverResult.fail(e.message)
        except httpx.HTTPError as e:
            logger.warning("Firestore %s failed: %s", operation, e)
            return DriverResult.fail(f"Firestore {operation} failed: {e}")
        except GoogleAuthError as e:
            logger.warning("Firestore %s not authorized: %s", operation, e)
            return DriverResult.fail(f"Firestore {operation} failed: credentials: {e}")
        except (TypeError, ValueError) as e:
            # Unsupported value types or malformed responses
            logger.warning("Firestore %s rejected: %s", operation, e)
            return DriverResult.fail(str(e))
