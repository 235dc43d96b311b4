"""Application services: the collection tree and its helpers."""

from docsync.application.services.collection import Collection
from docsync.application.services.tree import populate_tree, walk

__all__ = ["Collection", "populate_tree", "walk"]
