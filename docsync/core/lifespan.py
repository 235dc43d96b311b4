"""Store lifespan: startup and shutdown of driver, notifier and telemetry.

Single place for all wiring; no tree logic here. Backends are imported
lazily so a memory-only runtime never loads httpx or redis clients.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from docsync.application.interfaces import IDataDriver, INotifier
from docsync.application.services import Collection
from docsync.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

Closer = Callable[[], Awaitable[None]]


async def _noop() -> None:
    return None


async def create_driver(settings: Settings) -> tuple[IDataDriver, Closer]:
    """Build the configured driver; returns (driver, async close callback)."""
    if settings.driver_backend == "firestore":
        from docsync.infrastructure.firebase import (
            FirestoreDataDriver,
            create_firestore_client,
        )

        client = create_firestore_client(settings)
        driver = FirestoreDataDriver(
            client,
            collections_name=settings.firestore_collections_name,
            documents_name=settings.firestore_documents_name,
        )
        return driver, client.aclose

    from docsync.infrastructure.drivers import InMemoryDataDriver

    return InMemoryDataDriver(), _noop


async def create_notifier(settings: Settings) -> tuple[INotifier, Closer]:
    """Build the configured notifier; returns (notifier, async close callback)."""
    if settings.notifier_backend == "redis":
        from docsync.infrastructure.messaging import RedisChangeNotifier

        notifier = RedisChangeNotifier(settings=settings)
        await notifier.connect()
        if not notifier.is_available():
            logger.warning("Redis unavailable; change events will be dropped")
        return notifier, notifier.disconnect

    from docsync.infrastructure.messaging import InMemoryNotifier

    return InMemoryNotifier(history_size=settings.notifier_history_size), _noop


@dataclass
class StoreRuntime:
    """Driver and notifier shared by every Collection of one store."""

    settings: Settings
    driver: IDataDriver
    notifier: INotifier
    _closers: list[Closer] = field(default_factory=list, repr=False)

    def root(self) -> Collection:
        """Root collection node as configured (not fetched yet)."""
        return Collection(
            self.driver,
            self.notifier,
            id=self.settings.root_collection_id,
            name=self.settings.root_collection_name,
            path=self.settings.root_path,
        )

    def collection(
        self, id: str, name: str, parent_id: str, path: str
    ) -> Collection:
        """Node for an arbitrary known collection (e.g. reopened by id)."""
        return Collection(
            self.driver, self.notifier, id=id, name=name, parent_id=parent_id, path=path
        )

    async def aclose(self) -> None:
        """Run close callbacks in reverse creation order."""
        while self._closers:
            closer = self._closers.pop()
            try:
                await closer()
            except Exception:
                logger.exception("Error while closing store resource")


@asynccontextmanager
async def open_store(settings: Settings | None = None) -> AsyncIterator[StoreRuntime]:
    """Open driver, notifier (and telemetry when enabled); close them on exit.

    Startup order: logging, telemetry, driver, notifier. Shutdown runs in
    reverse.
    """
    settings = settings or get_settings()
    closers: list[Closer] = []

    if settings.configure_logging:
        from docsync.shared.telemetry.logging import setup_logging

        setup_logging(settings)

    if settings.telemetry_enabled:
        from docsync.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(settings)
        telemetry.start()
        set_telemetry(telemetry)

        async def _shutdown_telemetry() -> None:
            telemetry.shutdown()
            set_telemetry(None)

        closers.append(_shutdown_telemetry)

    try:
        driver, close_driver = await create_driver(settings)
        closers.append(close_driver)
        notifier, close_notifier = await create_notifier(settings)
        closers.append(close_notifier)
    except Exception:
        for closer in reversed(closers):
            await closer()
        raise
    logger.info(
        "Store opened (driver=%s, notifier=%s)",
        settings.driver_backend,
        settings.notifier_backend,
    )

    runtime = StoreRuntime(settings, driver, notifier, closers)
    try:
        yield runtime
    finally:
        await runtime.aclose()
        logger.info("Store closed")
