"""Domain exceptions for docsync.

Driver failures are modelled as values: a DriverError is returned to the
caller inside a MutationResult, never raised by the collection tree.
The exception types still derive from Exception so callers that prefer
raising can do `raise result.error`.
"""

from typing import Any


class DocSyncException(Exception):
    """Base exception for all docsync errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. operation, collection_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class DriverError(DocSyncException):
    """A data driver reported an error for an operation.

    Wraps the driver's own message; the collection cache is never updated
    when one of these is produced.
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        """Initialize with the driver message and the failing operation.

        Args:
            message: Error text reported by the driver.
            operation: Driver operation name (e.g. 'create_collection').
        """
        details = {"operation": operation} if operation else {}
        super().__init__(message or "Driver error", "DRIVER_ERROR", details)

    @property
    def operation(self) -> str | None:
        """Driver operation that failed, if known."""
        return self.details.get("operation")


class CollectionNotFoundException(DocSyncException):
    """Raised by drivers' helpers when a collection id has no record."""

    def __init__(self, collection_id: str) -> None:
        super().__init__(
            f"Collection not found: {collection_id}",
            "COLLECTION_NOT_FOUND",
            {"collection_id": collection_id},
        )


class DocumentNotFoundException(DocSyncException):
    """Raised by drivers' helpers when a document id has no record."""

    def __init__(self, document_id: str) -> None:
        super().__init__(
            f"Document not found: {document_id}",
            "DOCUMENT_NOT_FOUND",
            {"document_id": document_id},
        )


class RecordAlreadyExistsException(DocSyncException):
    """Raised by drivers' helpers when creating a record whose id is taken."""

    def __init__(self, record_type: str, record_id: str) -> None:
        super().__init__(
            f"{record_type} already exists: {record_id}",
            "RECORD_ALREADY_EXISTS",
            {"record_type": record_type, "record_id": record_id},
        )
