"""Domain enumerations for docsync.

Enums represent fixed sets of domain values (change taxonomy and
mutation outcomes).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ChangeSubject(_ValuesMixin, str, Enum):
    """What a change event is about."""

    COLLECTION = "collection"
    DOCUMENT = "document"


class ChangeType(_ValuesMixin, str, Enum):
    """Kind of change carried by a change event.

    QUERY is not a mutation: it delivers the result set of a query to
    observers of the query's collection path.
    """

    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    QUERY = "query"


class MutationOutcome(_ValuesMixin, str, Enum):
    """Branch taken by a collection mutation.

    ALREADY_EXISTS and NOT_FOUND are silent no-ops (no driver call, no
    event); FAILED means the driver reported an error and the cache was
    left untouched.
    """

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    FAILED = "failed"
