"""Data driver interface (port) and its result envelope.

Every driver operation is async and returns a DriverResult instead of
raising: a driver-side failure is a recoverable, reportable condition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from docsync.domain.entities import CollectionRecord, DataDocument, JSONValue
from docsync.domain.value_objects import QueryModel


@dataclass(frozen=True)
class DriverResult:
    """Result-or-error envelope returned by every driver call.

    sub_collections is set by get_sub_collections; docs by get_documents
    and query_documents. None means "not reported", which callers treat
    as an empty answer.
    """

    is_error: bool = False
    error: str | None = None
    sub_collections: list[CollectionRecord] | None = None
    docs: list[DataDocument] | None = None

    @classmethod
    def ok(
        cls,
        *,
        sub_collections: list[CollectionRecord] | None = None,
        docs: list[DataDocument] | None = None,
    ) -> DriverResult:
        """Successful result, optionally carrying child records or documents."""
        return cls(sub_collections=sub_collections, docs=docs)

    @classmethod
    def fail(cls, error: str) -> DriverResult:
        """Failed result carrying the driver's message."""
        return cls(is_error=True, error=error)


class IDataDriver(Protocol):
    """Protocol for persistence drivers (DIP).

    Identifiers are opaque strings generated by the caller. Implementations
    must never raise for a driver-side failure; they return
    DriverResult.fail(message).
    """

    async def get_collection(self, collection_id: str) -> DriverResult:
        """Existence check for one collection record."""

    async def create_collection(self, record: CollectionRecord) -> DriverResult:
        """Create a collection record (id, name, parent_id)."""

    async def get_sub_collections(self, collection_id: str) -> DriverResult:
        """Return direct children of a collection in sub_collections."""

    async def get_documents(self, collection_id: str) -> DriverResult:
        """Return documents directly owned by a collection in docs."""

    async def delete_collection(self, collection_id: str) -> DriverResult:
        """Delete a collection record."""

    async def create_document(self, document: DataDocument) -> DriverResult:
        """Create a document record."""

    async def update_document(self, document_id: str, value: JSONValue) -> DriverResult:
        """Replace the value of an existing document."""

    async def delete_document(self, document_id: str) -> DriverResult:
        """Delete a document record."""

    async def query_documents(
        self, collection_id: str, query: QueryModel
    ) -> DriverResult:
        """Run a query over a collection's documents; results in docs."""
