"""Redis Pub/Sub for change events.

The notifier publishes each ChangeEvent as JSON on `<prefix>:<path>`;
the subscriber yields events for one path and everything below it.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import AsyncIterator
from typing import Any

import redis.asyncio as redis

from docsync.core.config import Settings, get_settings
from docsync.core.constants import CHANNEL_SEP
from docsync.domain.enums import ChangeSubject, ChangeType
from docsync.domain.value_objects import ChangeEvent
from docsync.infrastructure.messaging.local_notifier import path_matches

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def _escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so a path is matched literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class _RedisPubSubBase:
    """Shared Redis connection and channel logic for change event pub/sub."""

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.redis = redis_client
        self.settings = settings or get_settings()
        self.channel_prefix = self.settings.redis_channel_prefix
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on startup."""
        if self._connected:
            return
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=self.settings.redis_password.get_secret_value() if self.settings.redis_password else None,
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Redis pub/sub connected")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis pub/sub connection failed: %s", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on shutdown."""
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis pub/sub disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected."""
        return self._connected and self.redis is not None

    def _get_channel(self, path: str) -> str:
        """Channel name for a collection path."""
        return f"{self.channel_prefix}{CHANNEL_SEP}{path}"


class RedisChangeNotifier(_RedisPubSubBase):
    """Publishes change events to Redis (implements INotifier).

    notify() is fire-and-forget: it schedules the publish on the running
    event loop and returns immediately. drain() waits for pending
    publishes (call before shutdown).
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(redis_client, settings)
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def notify(
        self, subject: ChangeSubject, type: ChangeType, payload: dict[str, Any]
    ) -> None:
        event = ChangeEvent(subject, type, dict(payload))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop, dropping %s %s at %s",
                subject.value,
                type.value,
                event.path,
            )
            return
        task = loop.create_task(self.publish(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def publish(self, event: ChangeEvent) -> bool:
        """Publish one change event on its path channel.

        Returns:
            True if published, False if Redis unavailable or publish failed.
        """
        if not self.is_available() or self.redis is None:
            logger.debug("Redis not available, skipping publish")
            return False
        try:
            channel = self._get_channel(event.path)
            message = json.dumps(event.to_dict(), default=str)
            await self.redis.publish(channel, message)
            logger.debug(
                "Published %s %s to %s", event.subject.value, event.type.value, channel
            )
        except Exception:
            logger.exception("Failed to publish change event")
            return False
        else:
            return True

    async def drain(self) -> None:
        """Wait for every publish scheduled by notify() so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def disconnect(self) -> None:
        await self.drain()
        await super().disconnect()


class ChangeEventSubscriber(_RedisPubSubBase):
    """Subscribes to change events from Redis.

    subscribe() is reentrant: each call uses a locally-scoped PubSub that is
    closed in finally, so concurrent subscriptions are safe.
    """

    async def subscribe(self, path: str = "") -> AsyncIterator[ChangeEvent]:
        """Yield change events at `path` or below it as they arrive."""
        if not self.is_available() or self.redis is None:
            logger.warning("Redis not available for subscription")
            return
        pattern = f"{_escape_glob(self._get_channel(path))}*"
        pubsub = self.redis.pubsub()
        try:
            await pubsub.psubscribe(pattern)
            logger.info("Subscribed to %s", pattern)
            async for message in pubsub.listen():
                if message["type"] != "pmessage":
                    continue
                try:
                    event = ChangeEvent.from_dict(json.loads(message["data"]))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                    logger.exception("Failed to parse change event message")
                    continue
                if path_matches(event.path, path):
                    yield event
        finally:
            await pubsub.punsubscribe(pattern)
            await pubsub.aclose()
            logger.info("Unsubscribed from %s", pattern)
