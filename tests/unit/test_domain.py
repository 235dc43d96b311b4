"""Unit tests for domain enums, exceptions, value objects and MutationResult."""

import pytest

from docsync.application.dtos import MutationResult
from docsync.domain.entities import CollectionRecord, DataDocument
from docsync.domain.enums import ChangeSubject, ChangeType, MutationOutcome
from docsync.domain.exceptions import (
    CollectionNotFoundException,
    DocSyncException,
    DriverError,
    RecordAlreadyExistsException,
)
from docsync.domain.value_objects import ChangeEvent, QueryFilter, QueryModel


def test_enum_values() -> None:
    assert ChangeSubject.values() == ["collection", "document"]
    assert ChangeType.values() == ["added", "updated", "deleted", "query"]
    assert "already_exists" in MutationOutcome.values()


def test_driver_error_carries_operation() -> None:
    err = DriverError("timeout", "get_documents")

    assert isinstance(err, DocSyncException)
    assert err.error_code == "DRIVER_ERROR"
    assert err.operation == "get_documents"
    assert str(err) == "timeout"
    assert DriverError("").message == "Driver error"


def test_not_found_and_exists_exceptions() -> None:
    missing = CollectionNotFoundException("C1")
    dup = RecordAlreadyExistsException("Document", "D1")

    assert missing.details == {"collection_id": "C1"}
    assert dup.message == "Document already exists: D1"
    assert dup.error_code == "RECORD_ALREADY_EXISTS"


def test_mutation_result_flags() -> None:
    failed = MutationResult.failed("create_collection", "nope")

    assert failed.is_error and not failed.ok and not failed.changed
    assert failed.error.operation == "create_collection"
    assert MutationResult(MutationOutcome.NOT_FOUND).ok
    assert not MutationResult(MutationOutcome.ALREADY_EXISTS).changed
    assert MutationResult(MutationOutcome.UPDATED).changed


def test_change_event_dict_round_trip() -> None:
    event = ChangeEvent(ChangeSubject.DOCUMENT, ChangeType.QUERY, {"path": "/p", "docs": []})

    data = event.to_dict()

    assert data == {"subject": "document", "type": "query", "payload": {"path": "/p", "docs": []}}
    assert ChangeEvent.from_dict(data) == event
    assert event.path == "/p"


def test_query_filter_validates_operator() -> None:
    assert QueryFilter("tags", "array_contains", "x").op == "array-contains"
    with pytest.raises(ValueError):
        QueryFilter("a", "~=", 1)
    with pytest.raises(ValueError):
        QueryFilter("", "==", 1)


def test_query_model_validation_and_where() -> None:
    with pytest.raises(ValueError):
        QueryModel("/p", direction="sideways")
    with pytest.raises(ValueError):
        QueryModel("/p", offset=-1)

    base = QueryModel("/p", limit=5)
    narrowed = base.where("age", ">", 1).where("name", "==", "x")

    assert base.filters == ()
    assert [f.field for f in narrowed.filters] == ["age", "name"]
    assert narrowed.limit == 5
    assert narrowed.collection_path == "/p"


def test_entities_from_dict_defaults() -> None:
    doc = DataDocument.from_dict({"id": "d1", "value": {"a": 1}})
    record = CollectionRecord.from_dict({"id": "c1", "name": "c"})

    assert doc.key == "d1"
    assert DataDocument.from_dict({"id": "d2", "key": "", "value": None}).key == ""
    assert doc.to_dict() == {"id": "d1", "parent_id": "", "key": "d1", "value": {"a": 1}}
    assert record.parent_id == "__root__"
