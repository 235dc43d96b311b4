"""Explicit recursive population and traversal of a collection tree."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from docsync.application.services.collection import Collection
from docsync.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)


@traced("tree.populate")
async def populate_tree(
    root: Collection,
    load_documents: bool = False,
    max_depth: int | None = None,
) -> int:
    """Fetch root, then each cached child, level by level.

    Every fetch replaces the node's direct children, so a parent is always
    fetched before its children are visited. Fetches run one at a time.

    Args:
        root: Node to start from (depth 0).
        load_documents: Also load documents on every fetched node.
        max_depth: Deepest level to fetch; None means the whole tree.

    Returns:
        Number of nodes fetched.
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError("max_depth must be >= 0")
    fetched = 0
    level = [root]
    depth = 0
    while level:
        next_level: list[Collection] = []
        for node in level:
            await node.fetch(load_documents=load_documents)
            fetched += 1
            if max_depth is None or depth < max_depth:
                next_level.extend(node.sub_collections)
        level = next_level
        depth += 1
    add_span_attributes(nodes_fetched=fetched)
    logger.debug("Populated %d collection(s) under %s", fetched, root.path or "/")
    return fetched


def walk(root: Collection) -> Iterator[tuple[int, Collection]]:
    """Yield (depth, node) depth-first over the cached tree, root first."""
    stack: list[tuple[int, Collection]] = [(0, root)]
    while stack:
        depth, node = stack.pop()
        yield depth, node
        children = node.sub_collections
        for child in reversed(children):
            stack.append((depth + 1, child))
