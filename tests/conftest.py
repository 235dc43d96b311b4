"""Pytest configuration and fixtures for docsync.

Collections are exercised against RecordingDriver (the in-memory driver
plus a call log and injectable failures) and an InMemoryNotifier with
history, so tests can assert on driver calls and emitted events.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from docsync.application.interfaces import DriverResult
from docsync.application.services import Collection
from docsync.core.config import get_settings
from docsync.domain.entities import CollectionRecord, DataDocument, JSONValue
from docsync.domain.value_objects import QueryModel
from docsync.infrastructure.drivers import InMemoryDataDriver
from docsync.infrastructure.messaging import InMemoryNotifier

ROOT_ID = "R"
ROOT_PATH = "/root"


class RecordingDriver(InMemoryDataDriver):
    """InMemoryDataDriver that logs every call and can be told to fail."""

    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency=latency)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures: dict[str, str] = {}

    def fail(self, operation: str, message: str = "boom") -> None:
        self.failures[operation] = message

    def heal(self, operation: str | None = None) -> None:
        if operation is None:
            self.failures.clear()
        else:
            self.failures.pop(operation, None)

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def count(self, operation: str) -> int:
        return self.names().count(operation)

    async def _record(
        self,
        operation: str,
        args: tuple[Any, ...],
        call: Callable[[], Awaitable[DriverResult]],
    ) -> DriverResult:
        self.calls.append((operation, args))
        if operation in self.failures:
            return DriverResult.fail(self.failures[operation])
        return await call()

    async def get_collection(self, collection_id: str) -> DriverResult:
        return await self._record(
            "get_collection",
            (collection_id,),
            lambda: InMemoryDataDriver.get_collection(self, collection_id),
        )

    async def create_collection(self, record: CollectionRecord) -> DriverResult:
        return await self._record(
            "create_collection",
            (record,),
            lambda: InMemoryDataDriver.create_collection(self, record),
        )

    async def get_sub_collections(self, collection_id: str) -> DriverResult:
        return await self._record(
            "get_sub_collections",
            (collection_id,),
            lambda: InMemoryDataDriver.get_sub_collections(self, collection_id),
        )

    async def get_documents(self, collection_id: str) -> DriverResult:
        return await self._record(
            "get_documents",
            (collection_id,),
            lambda: InMemoryDataDriver.get_documents(self, collection_id),
        )

    async def delete_collection(self, collection_id: str) -> DriverResult:
        return await self._record(
            "delete_collection",
            (collection_id,),
            lambda: InMemoryDataDriver.delete_collection(self, collection_id),
        )

    async def create_document(self, document: DataDocument) -> DriverResult:
        return await self._record(
            "create_document",
            (document,),
            lambda: InMemoryDataDriver.create_document(self, document),
        )

    async def update_document(self, document_id: str, value: JSONValue) -> DriverResult:
        return await self._record(
            "update_document",
            (document_id, value),
            lambda: InMemoryDataDriver.update_document(self, document_id, value),
        )

    async def delete_document(self, document_id: str) -> DriverResult:
        return await self._record(
            "delete_document",
            (document_id,),
            lambda: InMemoryDataDriver.delete_document(self, document_id),
        )

    async def query_documents(
        self, collection_id: str, query: QueryModel
    ) -> DriverResult:
        return await self._record(
            "query_documents",
            (collection_id, query),
            lambda: InMemoryDataDriver.query_documents(self, collection_id, query),
        )


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Drop DOCSYNC_* env vars and the settings cache around every test."""
    import os

    for name in list(os.environ):
        if name.upper().startswith("DOCSYNC_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(os.path.dirname(__file__))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def driver() -> RecordingDriver:
    return RecordingDriver()


@pytest.fixture
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier(history_size=100)


@pytest.fixture
def root(driver: RecordingDriver, notifier: InMemoryNotifier) -> Collection:
    """Unfetched root node (id R, path /root) with no driver records."""
    return Collection(driver, notifier, id=ROOT_ID, name="root", path=ROOT_PATH)


@pytest.fixture
async def fetched_root(
    root: Collection, driver: RecordingDriver, notifier: InMemoryNotifier
) -> Collection:
    """Root after fetch(load_documents=True); call log and history cleared."""
    await root.fetch(load_documents=True)
    driver.calls.clear()
    notifier.clear_history()
    return root
