"""Unit tests for populate_tree and walk."""

import pytest

from docsync.application.services import Collection, populate_tree, walk
from docsync.domain.entities import CollectionRecord, DataDocument
from tests.conftest import ROOT_ID


async def _seed(driver) -> None:
    """root -> (a -> (a1), b), with one document in a1."""
    records = [
        CollectionRecord(id=ROOT_ID, name="root"),
        CollectionRecord(id="A", name="a", parent_id=ROOT_ID),
        CollectionRecord(id="B", name="b", parent_id=ROOT_ID),
        CollectionRecord(id="A1", name="a1", parent_id="A"),
    ]
    for record in records:
        await driver.create_collection(record)
    await driver.create_document(DataDocument(id="d", parent_id="A1", key="k", value=1))
    driver.calls.clear()


@pytest.mark.asyncio
async def test_populate_tree_fetches_every_level(root: Collection, driver) -> None:
    await _seed(driver)

    fetched = await populate_tree(root, load_documents=True)

    assert fetched == 4
    paths = [(depth, node.path) for depth, node in walk(root)]
    assert paths == [
        (0, "/root"),
        (1, "/root/a"),
        (2, "/root/a/a1"),
        (1, "/root/b"),
    ]
    a1 = root.get_subcollection("a").get_subcollection("a1")
    assert [d.key for d in a1.documents] == ["k"]
    assert driver.count("create_collection") == 0


@pytest.mark.asyncio
async def test_populate_tree_respects_max_depth(root: Collection, driver) -> None:
    await _seed(driver)

    fetched = await populate_tree(root, max_depth=1)

    assert fetched == 3
    assert root.get_subcollection("a").get_subcollection("a1") is not None
    a1 = root.get_subcollection("a").get_subcollection("a1")
    assert a1.sub_collections == []
    assert "A1" not in [args[0] for name, args in driver.calls if name == "get_collection"]


@pytest.mark.asyncio
async def test_populate_tree_depth_zero_fetches_root_only(root: Collection, driver) -> None:
    await _seed(driver)

    assert await populate_tree(root, max_depth=0) == 1
    assert [c.name for c in root.sub_collections] == ["a", "b"]


@pytest.mark.asyncio
async def test_populate_tree_rejects_negative_depth(root: Collection) -> None:
    with pytest.raises(ValueError):
        await populate_tree(root, max_depth=-1)


def test_walk_unfetched_node_yields_only_itself(root: Collection) -> None:
    assert [(d, n.id) for d, n in walk(root)] == [(0, ROOT_ID)]
