"""Shared utilities (identifier generation)."""

from docsync.shared.utils.generators import generate_id

__all__ = ["generate_id"]
