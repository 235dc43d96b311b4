"""DTOs for collection operations."""

from docsync.application.dtos.mutation import MutationResult

__all__ = ["MutationResult"]
