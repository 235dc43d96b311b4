"""DTO returned by collection mutations."""

from __future__ import annotations

from dataclasses import dataclass

from docsync.domain.enums import MutationOutcome
from docsync.domain.exceptions import DriverError


@dataclass(frozen=True)
class MutationResult:
    """Which branch a mutation took, plus the driver error when it failed.

    Silent no-ops (ALREADY_EXISTS, NOT_FOUND) are successes: is_error is
    only True for FAILED.
    """

    outcome: MutationOutcome
    error: DriverError | None = None

    @property
    def is_error(self) -> bool:
        return self.outcome is MutationOutcome.FAILED

    @property
    def ok(self) -> bool:
        return not self.is_error

    @property
    def changed(self) -> bool:
        """True when the driver and cache were actually mutated."""
        return self.outcome in (
            MutationOutcome.CREATED,
            MutationOutcome.UPDATED,
            MutationOutcome.DELETED,
        )

    @classmethod
    def failed(cls, operation: str, message: str | None) -> MutationResult:
        """FAILED result wrapping the driver's message."""
        return cls(MutationOutcome.FAILED, DriverError(message or "", operation))


CREATED = MutationResult(MutationOutcome.CREATED)
UPDATED = MutationResult(MutationOutcome.UPDATED)
DELETED = MutationResult(MutationOutcome.DELETED)
ALREADY_EXISTS = MutationResult(MutationOutcome.ALREADY_EXISTS)
NOT_FOUND = MutationResult(MutationOutcome.NOT_FOUND)
