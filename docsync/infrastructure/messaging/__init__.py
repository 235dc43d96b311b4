"""Messaging: notifiers that fan change events out to observers."""

from docsync.infrastructure.messaging.local_notifier import (
    ChangeListener,
    InMemoryNotifier,
    path_matches,
)
from docsync.infrastructure.messaging.redis_pubsub import (
    ChangeEventSubscriber,
    RedisChangeNotifier,
)

__all__ = [
    "ChangeEventSubscriber",
    "ChangeListener",
    "InMemoryNotifier",
    "RedisChangeNotifier",
    "path_matches",
]
