"""Data drivers that do not need external services."""

from docsync.infrastructure.drivers.memory_driver import InMemoryDataDriver, run_query

__all__ = ["InMemoryDataDriver", "run_query"]
