"""Unit tests for Collection.create_subcollection / delete_subcollection."""

import pytest

from docsync.application.services import Collection
from docsync.domain.enums import ChangeSubject, ChangeType, MutationOutcome
from docsync.domain.exceptions import DriverError
from tests.conftest import ROOT_ID, ROOT_PATH


@pytest.mark.asyncio
async def test_bootstrap_scenario_create_then_duplicate(root, driver, notifier) -> None:
    """Unknown root is created on fetch; a duplicate sub-collection name is a silent no-op."""
    await root.fetch()

    assert driver.names() == ["get_collection", "create_collection", "get_sub_collections"]
    created = driver.calls[1][1][0]
    assert created.id == ROOT_ID
    assert root.sub_collections == []

    result = await root.create_subcollection("a")
    assert result.outcome is MutationOutcome.CREATED
    [child] = root.sub_collections
    assert child.name == "a"
    assert child.parent_id == ROOT_ID
    assert child.path == f"{ROOT_PATH}/a"
    [event] = notifier.history
    assert event.subject is ChangeSubject.COLLECTION
    assert event.type is ChangeType.ADDED
    assert event.payload == {"collection_id": child.id, "path": ROOT_PATH}

    calls_before = len(driver.calls)
    again = await root.create_subcollection("a")
    assert again.outcome is MutationOutcome.ALREADY_EXISTS
    assert again.ok
    assert len(driver.calls) == calls_before
    assert len(notifier.history) == 1
    assert [c.name for c in root.sub_collections] == ["a"]


@pytest.mark.asyncio
async def test_create_subcollection_uses_fresh_uuid_and_parent_id(fetched_root, driver) -> None:
    await fetched_root.create_subcollection("a")
    await fetched_root.create_subcollection("b")

    records = [args[0] for name, args in driver.calls if name == "create_collection"]
    assert len(records) == 2
    assert records[0].id != records[1].id
    assert len(records[0].id) == 36
    assert all(r.parent_id == ROOT_ID for r in records)
    assert sorted(c.name for c in driver.children_of(ROOT_ID)) == ["a", "b"]


@pytest.mark.asyncio
async def test_create_subcollection_driver_failure_leaves_cache(fetched_root, driver, notifier) -> None:
    driver.fail("create_collection", "quota exceeded")

    result = await fetched_root.create_subcollection("a")

    assert result.outcome is MutationOutcome.FAILED
    assert result.is_error
    assert isinstance(result.error, DriverError)
    assert result.error.message == "quota exceeded"
    assert result.error.operation == "create_collection"
    assert fetched_root.sub_collections == []
    assert notifier.history == []


@pytest.mark.asyncio
async def test_delete_subcollection_removes_and_notifies(fetched_root, driver, notifier) -> None:
    await fetched_root.create_subcollection("a")
    child_id = fetched_root.get_subcollection("a").id
    notifier.clear_history()

    result = await fetched_root.delete_subcollection("a")

    assert result.outcome is MutationOutcome.DELETED
    assert fetched_root.sub_collections == []
    assert ("delete_collection", (child_id,)) in driver.calls
    [event] = notifier.history
    assert (event.subject, event.type) == (ChangeSubject.COLLECTION, ChangeType.DELETED)
    assert event.payload == {"collection_id": child_id, "path": ROOT_PATH}


@pytest.mark.asyncio
async def test_delete_missing_subcollection_is_noop(fetched_root, driver, notifier) -> None:
    result = await fetched_root.delete_subcollection("nope")

    assert result.outcome is MutationOutcome.NOT_FOUND
    assert driver.calls == []
    assert notifier.history == []


@pytest.mark.asyncio
async def test_delete_subcollection_failure_keeps_child_cached(fetched_root, driver, notifier) -> None:
    await fetched_root.create_subcollection("a")
    notifier.clear_history()
    driver.fail("delete_collection")

    result = await fetched_root.delete_subcollection("a")

    assert result.is_error
    assert [c.name for c in fetched_root.sub_collections] == ["a"]
    assert notifier.history == []


@pytest.mark.asyncio
async def test_sibling_names_stay_in_sync_with_driver(fetched_root, driver) -> None:
    """Cached names match the driver after a mixed create/delete sequence, and stay unique."""
    steps = [
        ("create", "a"), ("create", "b"), ("create", "a"), ("delete", "b"),
        ("create", "c"), ("delete", "x"), ("create", "b"), ("delete", "a"),
    ]
    for action, name in steps:
        if action == "create":
            await fetched_root.create_subcollection(name)
        else:
            await fetched_root.delete_subcollection(name)
        cached = sorted(c.name for c in fetched_root.sub_collections)
        stored = sorted(c.name for c in driver.children_of(ROOT_ID))
        assert cached == stored
        assert len(cached) == len(set(cached))
    assert sorted(c.name for c in fetched_root.sub_collections) == ["b", "c"]


@pytest.mark.asyncio
async def test_child_nodes_share_driver_and_notifier(fetched_root, driver, notifier) -> None:
    await fetched_root.create_subcollection("a")
    child = fetched_root.get_subcollection("a")

    assert isinstance(child, Collection)
    assert child.driver is driver
    assert child.notifier is notifier
    assert fetched_root.get_subcollection("missing") is None
