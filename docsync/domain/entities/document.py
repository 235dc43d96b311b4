"""Document entity: a leaf value record identified by key within one collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

# Opaque, JSON-serializable payload (the store never inspects it).
JSONValue: TypeAlias = (
    dict[str, "JSONValue"] | list["JSONValue"] | str | int | float | bool | None
)


@dataclass
class DataDocument:
    """A document as held by the driver and cached by its collection.

    `key` is unique among the documents of one collection; `value` is
    mutated in place when the document is updated.
    """

    id: str
    parent_id: str
    key: str
    value: JSONValue

    def to_dict(self) -> dict[str, Any]:
        """Serialize for event payloads and JSON transport."""
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "key": self.key,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DataDocument:
        """Build from a dict produced by to_dict() or a driver record."""
        return cls(
            id=data["id"],
            parent_id=data.get("parent_id", ""),
            key=data["id"] if data.get("key") is None else data["key"],
            value=data.get("value"),
        )
