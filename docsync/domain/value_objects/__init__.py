"""Domain value objects: change events and query descriptions."""

from docsync.domain.value_objects.change_event import ChangeEvent
from docsync.domain.value_objects.query import QUERY_OPERATORS, QueryFilter, QueryModel

__all__ = ["ChangeEvent", "QUERY_OPERATORS", "QueryFilter", "QueryModel"]
