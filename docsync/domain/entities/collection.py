"""Collection record: the driver-side shape of a collection node."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from docsync.core.constants import ROOT_PARENT_ID


@dataclass(frozen=True)
class CollectionRecord:
    """Identity of one collection as persisted by a driver."""

    id: str
    name: str
    parent_id: str = ROOT_PARENT_ID

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "parent_id": self.parent_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollectionRecord:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            parent_id=data.get("parent_id") or ROOT_PARENT_ID,
        )
