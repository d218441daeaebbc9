"""Snapshot-based edits on component trees.

Edits never mutate their input: each returns a new root built from a deep
copy, and callers swap their reference. Node ids survive the copy.
"""

from __future__ import annotations

from collections import Counter
import copy
from typing import Iterator, Optional, Tuple

from spnet.circuits.core import Component
from spnet.errors import CircuitStructureError


Located = Tuple[Component, Optional[Component]]


def iter_nodes(root: Component) -> Iterator[Component]:
    """Yield every node in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def iter_with_parents(root: Component) -> Iterator[Located]:
    stack: list[Located] = [(root, None)]
    while stack:
        node, parent = stack.pop()
        yield node, parent
        stack.extend((child, node) for child in reversed(node.children))


def find(root: Component, node_id: str) -> Optional[Located]:
    """Depth-first search for ``node_id``; returns ``(node, parent)`` or ``None``."""
    for node, parent in iter_with_parents(root):
        if node.id == node_id:
            return node, parent
    return None


def snapshot(root: Component) -> Component:
    return copy.deepcopy(root)


def insert_child(root: Component, parent_id: str, component: Component) -> Component:
    """Return a new tree with ``component`` appended under ``parent_id``."""
    incoming = _owned_ids(component)
    existing = {node.id for node in iter_nodes(root)}
    clashes = sorted(existing.intersection(incoming))
    if clashes:
        raise CircuitStructureError(f"Component ids already in the tree: {', '.join(clashes)}.")

    new_root = snapshot(root)
    located = find(new_root, parent_id)
    if located is None:
        raise CircuitStructureError(f"Unknown parent id: {parent_id}")
    parent, _ = located
    if not parent.holds_children:
        raise CircuitStructureError(f"{parent.kind} '{parent.label}' cannot hold children.")
    parent.children.append(snapshot(component))
    return new_root


def _owned_ids(component: Component) -> list[str]:
    """Ids under ``component``; every node must appear exactly once."""
    seen: set[int] = set()
    ids: list[str] = []
    stack = [component]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            raise CircuitStructureError(f"{node.kind} '{node.label}' appears more than once in the inserted subtree.")
        seen.add(id(node))
        ids.append(node.id)
        stack.extend(node.children)
    duplicates = sorted(node_id for node_id, count in Counter(ids).items() if count > 1)
    if duplicates:
        raise CircuitStructureError(f"Duplicate ids in the inserted subtree: {', '.join(duplicates)}.")
    return ids


def remove_child(root: Component, node_id: str) -> Component:
    """Return a new tree without the subtree rooted at ``node_id``."""
    if node_id == root.id:
        raise CircuitStructureError("The root node cannot be removed.")
    new_root = snapshot(root)
    located = find(new_root, node_id)
    if located is None:
        raise CircuitStructureError(f"Unknown node id: {node_id}")
    _, parent = located
    parent.children = [child for child in parent.children if child.id != node_id]
    return new_root
