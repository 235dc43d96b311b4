"""Query model value objects.

A QueryModel is passed opaquely from a collection to its driver. The
collection only reads collection_path (for event addressing); filters,
ordering and paging are interpreted by the driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

# Operator vocabulary shared by all drivers.
QUERY_OPERATORS = frozenset({
    "==",
    "!=",
    "<",
    "<=",
    ">",
    ">=",
    "in",
    "not-in",
    "array-contains",
    "array-contains-any",
})


@dataclass(frozen=True)
class QueryFilter:
    """Single field filter (field path into the document value, operator, operand)."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("QueryFilter field must be a non-empty string")
        # Accept the underscore spelling used by some callers.
        op = self.op.replace("_", "-")
        if op not in QUERY_OPERATORS:
            raise ValueError(f"Unsupported query operator: {self.op!r}")
        object.__setattr__(self, "op", op)


@dataclass(frozen=True)
class QueryModel:
    """Structured filter/sort/limit description of a document query."""

    ASCENDING: ClassVar[str] = "ASCENDING"
    DESCENDING: ClassVar[str] = "DESCENDING"

    collection_path: str
    filters: tuple[QueryFilter, ...] = ()
    order_by: str | None = None
    direction: str = "ASCENDING"
    offset: int = 0
    limit: int | None = None
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", tuple(self.filters))
        if self.direction not in (self.ASCENDING, self.DESCENDING):
            raise ValueError(
                f"direction must be ASCENDING or DESCENDING, got: {self.direction!r}"
            )
        if self.offset < 0:
            raise ValueError("offset must be >= 0")
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be >= 0")

    def where(self, field_path: str, op: str, value: Any) -> QueryModel:
        """Return a copy with one more filter (filters are ANDed)."""
        return QueryModel(
            collection_path=self.collection_path,
            filters=(*self.filters, QueryFilter(field_path, op, value)),
            order_by=self.order_by,
            direction=self.direction,
            offset=self.offset,
            limit=self.limit,
            options=dict(self.options),
        )
