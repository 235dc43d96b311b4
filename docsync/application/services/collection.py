"""Collection node: in-memory cache of one collection's direct children.

Every mutation goes through the driver first; only a successful driver
call updates the local cache and emits a change event. A failed call is
returned as a MutationResult carrying a DriverError and leaves the cache
exactly as it was.

Each node only materializes its direct sub-collections and documents.
Deeper levels are populated by calling fetch() on the children (see
docsync.application.services.tree.populate_tree).
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

from docsync.application.dtos import MutationResult
from docsync.application.dtos.mutation import ALREADY_EXISTS, CREATED, DELETED, NOT_FOUND, UPDATED
from docsync.application.interfaces import IDataDriver, INotifier
from docsync.core.constants import PATH_SEP, ROOT_PARENT_ID
from docsync.domain.entities import CollectionRecord, DataDocument, JSONValue
from docsync.domain.enums import ChangeSubject, ChangeType
from docsync.domain.value_objects import QueryModel
from docsync.shared.telemetry.tracing import add_span_attributes, add_span_event, traced
from docsync.shared.utils import generate_id

logger = logging.getLogger(__name__)


class Collection:
    """A node of the collection tree.

    Holds shared (not owned) references to a driver and a notifier, and
    exclusively owns its sub_collections and documents caches. Mutations
    and fetch on one node are serialized by a per-node asyncio.Lock, so
    un-awaited concurrent calls are applied in call order.
    """

    def __init__(
        self,
        driver: IDataDriver,
        notifier: INotifier,
        *,
        id: str,
        name: str,
        parent_id: str = ROOT_PARENT_ID,
        path: str = "",
    ) -> None:
        self.driver = driver
        self.notifier = notifier
        self.id = id
        self.name = name
        self.parent_id = parent_id
        self.path = path
        self._sub_collections: list[Collection] = []
        self._documents: list[DataDocument] = []
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"Collection(id={self.id!r}, name={self.name!r}, path={self.path!r})"

    @property
    def sub_collections(self) -> list[Collection]:
        """Cached direct children (populated by fetch).

        The list is a copy but the nodes are the live children, so callers
        can fetch or mutate them.
        """
        return list(self._sub_collections)

    @property
    def documents(self) -> list[DataDocument]:
        """Copies of the cached documents (populated by fetch(load_documents=True))."""
        return copy.deepcopy(self._documents)

    def record(self) -> CollectionRecord:
        """Driver-side record for this node."""
        return CollectionRecord(id=self.id, name=self.name, parent_id=self.parent_id)

    def child_path(self, name: str) -> str:
        return f"{self.path}{PATH_SEP}{name}"

    def get_subcollection(self, name: str) -> Collection | None:
        """Cached child with this name, or None. Does not call the driver."""
        index = self._find_subcollection(name)
        return None if index == -1 else self._sub_collections[index]

    def get_document(self, key: str) -> DataDocument | None:
        """Copy of the cached document with this key, or None. Does not call the driver."""
        index = self._find_document(key)
        return None if index == -1 else copy.deepcopy(self._documents[index])

    # ---- Synchronization ----

    @traced("collection.fetch")
    async def fetch(self, load_documents: bool = False) -> None:
        """Resync the direct children (and optionally documents) from the driver.

        A missing own record is created from this node's identity. If that
        creation fails the error is logged and the fetch is abandoned with
        the caches unchanged. Sub-collections (and documents when
        load_documents is True) are replaced wholesale, not merged.
        Grandchildren are never touched.
        """
        async with self._lock:
            result = await self.driver.get_collection(self.id)
            if result.is_error:
                logger.debug(
                    "Collection %s not found (%s), creating it", self.id, result.error
                )
                result = await self.driver.create_collection(self.record())
                if result.is_error:
                    logger.error(
                        "Failed to create collection %s (%s): %s",
                        self.id,
                        self.path,
                        result.error,
                    )
                    return
                add_span_event("collection.created_on_fetch", {"collection_id": self.id})

            result = await self.driver.get_sub_collections(self.id)
            if result.is_error:
                logger.warning(
                    "Failed to list sub-collections of %s: %s", self.id, result.error
                )
            elif result.sub_collections is not None:
                self._sub_collections = [
                    self._spawn(child) for child in result.sub_collections
                ]

            if load_documents:
                result = await self.driver.get_documents(self.id)
                if result.is_error:
                    logger.warning(
                        "Failed to load documents of %s: %s", self.id, result.error
                    )
                else:
                    self._documents = list(result.docs or [])

    # ---- Sub-collections ----

    @traced("collection.create_subcollection")
    async def create_subcollection(self, name: str) -> MutationResult:
        """Create a direct child named `name`.

        A sibling with the same name already cached makes this a no-op
        (ALREADY_EXISTS): no driver call and no event.
        """
        async with self._lock:
            if self._find_subcollection(name) != -1:
                return ALREADY_EXISTS
            record = CollectionRecord(id=generate_id(), name=name, parent_id=self.id)
            result = await self.driver.create_collection(record)
            if result.is_error:
                return MutationResult.failed("create_collection", result.error)
            self._sub_collections.append(self._spawn(record))
            self._emit(
                ChangeSubject.COLLECTION,
                ChangeType.ADDED,
                {"collection_id": record.id, "path": self.path},
            )
            return CREATED

    @traced("collection.delete_subcollection")
    async def delete_subcollection(self, name: str) -> MutationResult:
        """Delete the direct child named `name`; NOT_FOUND no-op when absent.

        When the driver refuses the delete the child stays cached.
        """
        async with self._lock:
            index = self._find_subcollection(name)
            if index == -1:
                return NOT_FOUND
            deleted_id = self._sub_collections[index].id
            result = await self.driver.delete_collection(deleted_id)
            if result.is_error:
                return MutationResult.failed("delete_collection", result.error)
            del self._sub_collections[index]
            self._emit(
                ChangeSubject.COLLECTION,
                ChangeType.DELETED,
                {"collection_id": deleted_id, "path": self.path},
            )
            return DELETED

    # ---- Documents ----

    @traced("collection.create_document")
    async def create_document(
        self, value: JSONValue, key: str | None = None
    ) -> MutationResult:
        """Create a document, or update the cached one with the same key.

        An omitted key never matches: the document is always created and
        its generated id becomes its key.
        """
        return await self._upsert(value, key)

    @traced("collection.update_document")
    async def update_document(
        self, value: JSONValue, key: str | None = None
    ) -> MutationResult:
        """Update the document with this key, creating it when absent.

        Same upsert contract as create_document; the driver update targets
        the matched document's id.
        """
        return await self._upsert(value, key)

    @traced("collection.delete_document")
    async def delete_document(self, key: str) -> MutationResult:
        """Delete the document with this key; NOT_FOUND no-op when absent."""
        async with self._lock:
            index = self._find_document(key)
            if index == -1:
                return NOT_FOUND
            result = await self.driver.delete_document(self._documents[index].id)
            if result.is_error:
                return MutationResult.failed("delete_document", result.error)
            del self._documents[index]
            self._emit(
                ChangeSubject.DOCUMENT,
                ChangeType.DELETED,
                {"collection_id": self.id, "key": key, "path": self.path},
            )
            return DELETED

    # ---- Queries ----

    @traced("collection.query")
    async def query(self, query: QueryModel) -> None:
        """Run a query through the driver and publish the result set.

        Never reads or writes the caches. Exactly one QUERY event is emitted,
        addressed to query.collection_path; docs is [] when the driver
        returned nothing or failed.
        """
        add_span_attributes(query_path=query.collection_path)
        result = await self.driver.query_documents(self.id, query)
        if result.is_error:
            logger.warning("Query on collection %s failed: %s", self.id, result.error)
        docs = result.docs or []
        self._emit(
            ChangeSubject.DOCUMENT,
            ChangeType.QUERY,
            {
                "collection_id": self.id,
                "path": query.collection_path,
                "docs": [doc.to_dict() for doc in docs],
            },
        )

    # ---- Internals ----

    async def _upsert(self, value: JSONValue, key: str | None) -> MutationResult:
        async with self._lock:
            index = -1 if key is None else self._find_document(key)
            if index == -1:
                doc_id = generate_id()
                document = DataDocument(
                    id=doc_id,
                    parent_id=self.id,
                    key=doc_id if key is None else key,
                    value=value,
                )
                result = await self.driver.create_document(document)
                if result.is_error:
                    return MutationResult.failed("create_document", result.error)
                self._documents.append(copy.deepcopy(document))
                self._emit(
                    ChangeSubject.DOCUMENT,
                    ChangeType.ADDED,
                    {
                        "collection_id": self.id,
                        "key": document.key,
                        "value": value,
                        "path": self.path,
                    },
                )
                return CREATED

            existing = self._documents[index]
            result = await self.driver.update_document(existing.id, value)
            if result.is_error:
                return MutationResult.failed("update_document", result.error)
            existing.value = copy.deepcopy(value)
            self._emit(
                ChangeSubject.DOCUMENT,
                ChangeType.UPDATED,
                {
                    "collection_id": self.id,
                    "key": key,
                    "value": value,
                    "path": self.path,
                },
            )
            return UPDATED

    def _spawn(self, record: CollectionRecord) -> Collection:
        return Collection(
            self.driver,
            self.notifier,
            id=record.id,
            name=record.name,
            parent_id=self.id,
            path=self.child_path(record.name),
        )

    def _find_subcollection(self, name: str) -> int:
        for index, child in enumerate(self._sub_collections):
            if child.name == name:
                return index
        return -1

    def _find_document(self, key: str) -> int:
        for index, doc in enumerate(self._documents):
            if doc.key == key:
                return index
        return -1

    def _emit(
        self, subject: ChangeSubject, type_: ChangeType, payload: dict[str, Any]
    ) -> None:
        logger.debug("%s %s at %s", subject.value, type_.value, payload.get("path"))
        self.notifier.notify(subject, type_, payload)
