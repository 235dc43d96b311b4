"""In-process data driver backed by dicts.

Implements IDataDriver for development and tests. Values are deep-copied
on the way in and out so callers never share memory with the store.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from docsync.application.interfaces import DriverResult
from docsync.core.constants import KEY_FIELD
from docsync.domain.entities import CollectionRecord, DataDocument, JSONValue
from docsync.domain.exceptions import (
    CollectionNotFoundException,
    DocSyncException,
    DocumentNotFoundException,
    RecordAlreadyExistsException,
)
from docsync.domain.value_objects import QueryFilter, QueryModel

logger = logging.getLogger(__name__)

_MISSING = object()


def _resolve_field(document: DataDocument, field_path: str) -> Any:
    """Value at a dotted path inside the document value; KEY_FIELD is the key."""
    if field_path == KEY_FIELD:
        return document.key
    current: Any = document.value
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _matches(document: DataDocument, flt: QueryFilter) -> bool:
    """Evaluate one filter; a missing field only matches '!=' and 'not-in'."""
    actual = _resolve_field(document, flt.field)
    if actual is _MISSING:
        return flt.op in ("!=", "not-in")
    try:
        if flt.op == "==":
            return actual == flt.value
        if flt.op == "!=":
            return actual != flt.value
        if flt.op == "<":
            return actual < flt.value
        if flt.op == "<=":
            return actual <= flt.value
        if flt.op == ">":
            return actual > flt.value
        if flt.op == ">=":
            return actual >= flt.value
        if flt.op == "in":
            return actual in flt.value
        if flt.op == "not-in":
            return actual not in flt.value
        if flt.op == "array-contains":
            return isinstance(actual, list) and flt.value in actual
        if flt.op == "array-contains-any":
            return isinstance(actual, list) and any(v in actual for v in flt.value)
    except TypeError:
        # Incomparable types never match (same as Firestore's typed ordering).
        return False
    return False


def _sort_key(value: Any) -> tuple[int, Any]:
    """Order missing/None first, then numbers, then strings, then the rest by repr."""
    if value is _MISSING or value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, repr(value))


def run_query(documents: list[DataDocument], query: QueryModel) -> list[DataDocument]:
    """Apply filters (ANDed), ordering, offset and limit to a document list."""
    selected = [d for d in documents if all(_matches(d, f) for f in query.filters)]
    if query.order_by:
        selected.sort(
            key=lambda d: _sort_key(_resolve_field(d, query.order_by)),
            reverse=query.direction == QueryModel.DESCENDING,
        )
    selected = selected[query.offset:]
    if query.limit is not None:
        selected = selected[: query.limit]
    return selected


class InMemoryDataDriver:
    """Dict-backed driver (implements IDataDriver).

    Args:
        latency: Seconds to sleep before every operation, to simulate I/O
            suspension points.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self._collections: dict[str, CollectionRecord] = {}
        self._documents: dict[str, DataDocument] = {}

    # ---- Inspection helpers (not part of IDataDriver) ----

    def collection_records(self) -> list[CollectionRecord]:
        return list(self._collections.values())

    def document_records(self) -> list[DataDocument]:
        return [copy.deepcopy(d) for d in self._documents.values()]

    def children_of(self, collection_id: str) -> list[CollectionRecord]:
        return [c for c in self._collections.values() if c.parent_id == collection_id]

    def documents_of(self, collection_id: str) -> list[DataDocument]:
        return [
            copy.deepcopy(d)
            for d in self._documents.values()
            if d.parent_id == collection_id
        ]

    # ---- IDataDriver ----

    async def get_collection(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            self._require_collection(collection_id)
            return DriverResult.ok()

        return await self._run("get_collection", op)

    async def create_collection(self, record: CollectionRecord) -> DriverResult:
        async def op() -> DriverResult:
            if record.id in self._collections:
                raise RecordAlreadyExistsException("Collection", record.id)
            self._collections[record.id] = record
            return DriverResult.ok()

        return await self._run("create_collection", op)

    async def get_sub_collections(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            self._require_collection(collection_id)
            return DriverResult.ok(sub_collections=self.children_of(collection_id))

        return await self._run("get_sub_collections", op)

    async def get_documents(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            self._require_collection(collection_id)
            return DriverResult.ok(docs=self.documents_of(collection_id))

        return await self._run("get_documents", op)

    async def delete_collection(self, collection_id: str) -> DriverResult:
        async def op() -> DriverResult:
            self._require_collection(collection_id)
            removed = self._delete_subtree(collection_id)
            logger.debug("Deleted %d collection(s) under %s", removed, collection_id)
            return DriverResult.ok()

        return await self._run("delete_collection", op)

    async def create_document(self, document: DataDocument) -> DriverResult:
        async def op() -> DriverResult:
            if document.id in self._documents:
                raise RecordAlreadyExistsException("Document", document.id)
            self._require_collection(document.parent_id)
            self._documents[document.id] = copy.deepcopy(document)
            return DriverResult.ok()

        return await self._run("create_document", op)

    async def update_document(self, document_id: str, value: JSONValue) -> DriverResult:
        async def op() -> DriverResult:
            stored = self._documents.get(document_id)
            if stored is None:
                raise DocumentNotFoundException(document_id)
            stored.value = copy.deepcopy(value)
            return DriverResult.ok()

        return await self._run("update_document", op)

    async def delete_document(self, document_id: str) -> DriverResult:
        async def op() -> DriverResult:
            if self._documents.pop(document_id, None) is None:
                raise DocumentNotFoundException(document_id)
            return DriverResult.ok()

        return await self._run("delete_document", op)

    async def query_documents(
        self, collection_id: str, query: QueryModel
    ) -> DriverResult:
        async def op() -> DriverResult:
            self._require_collection(collection_id)
            return DriverResult.ok(docs=run_query(self.documents_of(collection_id), query))

        return await self._run("query_documents", op)

    # ---- Internals ----

    async def _run(
        self, operation: str, op: Callable[[], Awaitable[DriverResult]]
    ) -> DriverResult:
        """Run op, turning domain exceptions into DriverResult.fail."""
        if self.latency:
            await asyncio.sleep(self.latency)
        try:
            return await op()
        except DocSyncException as e:
            logger.debug("%s failed: %s", operation, e.message)
            return DriverResult.fail(e.message)

    def _require_collection(self, collection_id: str) -> CollectionRecord:
        record = self._collections.get(collection_id)
        if record is None:
            raise CollectionNotFoundException(collection_id)
        return record

    def _delete_subtree(self, collection_id: str) -> int:
        removed = 0
        for child in self.children_of(collection_id):
            removed += self._delete_subtree(child.id)
        for doc_id in [d.id for d in self._documents.values() if d.parent_id == collection_id]:
            del self._documents[doc_id]
        del self._collections[collection_id]
        return removed + 1
