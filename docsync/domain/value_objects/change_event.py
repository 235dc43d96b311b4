"""Change event: the (subject, type, payload) triple sent through a notifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from docsync.domain.enums import ChangeSubject, ChangeType


@dataclass(frozen=True)
class ChangeEvent:
    """One observed mutation or query result.

    payload always carries `path` (the emitting collection's path, or the
    query model's collection_path for QUERY events).
    """

    subject: ChangeSubject
    type: ChangeType
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return self.payload.get("path", "")

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON publish."""
        return {
            "subject": self.subject.value,
            "type": self.type.value,
            "payload": dict(self.payload),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChangeEvent:
        """Deserialize from a pub/sub message."""
        return cls(
            subject=ChangeSubject(data["subject"]),
            type=ChangeType(data["type"]),
            payload=dict(data.get("payload") or {}),
        )
