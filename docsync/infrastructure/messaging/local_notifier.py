"""In-process notifier: synchronous fan-out of change events to callbacks."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from docsync.core.constants import PATH_SEP
from docsync.domain.enums import ChangeSubject, ChangeType
from docsync.domain.value_objects import ChangeEvent

logger = logging.getLogger(__name__)

ChangeListener = Callable[[ChangeEvent], None]


def path_matches(path: str, prefix: str | None) -> bool:
    """True when path is prefix itself or lies below it ('/a' covers '/a/b', not '/ab')."""
    if not prefix:
        return True
    if path == prefix:
        return True
    return path.startswith(prefix.rstrip(PATH_SEP) + PATH_SEP)


@dataclass
class _Subscription:
    listener: ChangeListener
    path_prefix: str | None
    subjects: frozenset[ChangeSubject] | None


class InMemoryNotifier:
    """Delivers each event to every matching subscriber, in subscription order.

    A listener that raises is logged and skipped; it never affects the
    collection that emitted the event or the other listeners.

    Args:
        history_size: Keep the last N events in `history` (0 disables).
    """

    def __init__(self, history_size: int = 0) -> None:
        self._subscriptions: list[_Subscription] = []
        self._history: deque[ChangeEvent] | None = (
            deque(maxlen=history_size) if history_size > 0 else None
        )

    @property
    def history(self) -> list[ChangeEvent]:
        """Most recent events, oldest first (empty when history is disabled)."""
        return list(self._history) if self._history is not None else []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        listener: ChangeListener,
        path_prefix: str | None = None,
        subjects: set[ChangeSubject] | None = None,
    ) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it.

        Args:
            listener: Called with each matching ChangeEvent.
            path_prefix: Only events at this path or below it.
            subjects: Only events about these subjects.
        """
        subscription = _Subscription(
            listener, path_prefix, frozenset(subjects) if subjects else None
        )
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    def notify(
        self, subject: ChangeSubject, type: ChangeType, payload: dict[str, Any]
    ) -> None:
        self.publish(ChangeEvent(subject, type, dict(payload)))

    def publish(self, event: ChangeEvent) -> int:
        """Deliver an already-built event. Returns the number of listeners reached."""
        if self._history is not None:
            self._history.append(event)
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.subjects and event.subject not in subscription.subjects:
                continue
            if not path_matches(event.path, subscription.path_prefix):
                continue
            try:
                subscription.listener(event)
            except Exception:
                logger.exception(
                    "Change listener failed for %s %s at %s",
                    event.subject.value,
                    event.type.value,
                    event.path,
                )
                continue
            delivered += 1
        return delivered

    def clear_history(self) -> None:
        if self._history is not None:
            self._history.clear()
