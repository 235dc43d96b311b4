"""docsync: client-side collection/document tree over a pluggable driver.

Typical use:

    async with open_store() as store:
        root = store.root()
        await root.fetch()
        await root.create_subcollection("notes")
"""

from docsync.application.dtos import MutationResult
from docsync.application.interfaces import DriverResult, IDataDriver, INotifier
from docsync.application.services import Collection, populate_tree, walk
from docsync.core.lifespan import StoreRuntime, open_store
from docsync.domain import (
    ChangeEvent,
    ChangeSubject,
    ChangeType,
    CollectionRecord,
    DataDocument,
    DriverError,
    MutationOutcome,
    QueryFilter,
    QueryModel,
)

__version__ = "1.0.0"

__all__ = [
    "ChangeEvent",
    "ChangeSubject",
    "ChangeType",
    "Collection",
    "CollectionRecord",
    "DataDocument",
    "DriverError",
    "DriverResult",
    "IDataDriver",
    "INotifier",
    "MutationOutcome",
    "MutationResult",
    "QueryFilter",
    "QueryModel",
    "StoreRuntime",
    "open_store",
    "populate_tree",
    "walk",
]
