"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from docsync.domain.entities import CollectionRecord, DataDocument, JSONValue
from docsync.domain.enums import ChangeSubject, ChangeType, MutationOutcome
from docsync.domain.exceptions import (
    CollectionNotFoundException,
    DocSyncException,
    DocumentNotFoundException,
    DriverError,
    RecordAlreadyExistsException,
)
from docsync.domain.value_objects import ChangeEvent, QueryFilter, QueryModel

__all__ = [
    # Entities
    "CollectionRecord",
    "DataDocument",
    "JSONValue",
    # Enums
    "ChangeSubject",
    "ChangeType",
    "MutationOutcome",
    # Exceptions
    "CollectionNotFoundException",
    "DocSyncException",
    "DocumentNotFoundException",
    "DriverError",
    "RecordAlreadyExistsException",
    # Value objects
    "ChangeEvent",
    "QueryFilter",
    "QueryModel",
]
