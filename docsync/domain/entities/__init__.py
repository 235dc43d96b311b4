"""Domain entities: collection records and documents."""

from docsync.domain.entities.collection import CollectionRecord
from docsync.domain.entities.document import DataDocument, JSONValue

__all__ = ["CollectionRecord", "DataDocument", "JSONValue"]
