"""Notifier interface (port) for change events."""

from __future__ import annotations

from typing import Any, Protocol

from docsync.domain.enums import ChangeSubject, ChangeType


class INotifier(Protocol):
    """Fan-out channel for change events (DIP).

    notify() is fire-and-forget: collections only write to the channel and
    make no assumption about delivery order, timing or subscriber count.
    """

    def notify(
        self, subject: ChangeSubject, type: ChangeType, payload: dict[str, Any]
    ) -> None:
        """Accept one change event for delivery."""
