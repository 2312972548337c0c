"""Hierarchical namespace of compiled requests keyed by URL path segments.

The tree is an arena: every :class:`~postmangen.models.PathTreeNode` lives in
:attr:`PathTree.nodes` and refers to its children by index, so "where to
insert next" is always just an integer. The root sits at index ``0``.

:meth:`PathTree.attach` files a request under the groups named by all but
its last path segment, creating groups lazily and reusing existing ones by
name. Requests are always appended as new leaves; registering the same
route twice gives two sibling leaves.

Example::

    tree = PathTree()
    tree.attach(compile_request("POST", "/users", fields))
    tree.attach(compile_request("GET", "/users/:userId", fields))
    # root
    # +-- users            (POST /users)
    # +-- users            (group)
    #     +-- :userId      (GET /users/:userId)
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional, Sequence

from postmangen.models import CompiledRequest, PathTreeNode

logger = logging.getLogger(__name__)

ROOT = 0
"""Arena index of the root node."""


class PathTree:
    """Arena-backed tree of groups and request leaves."""

    def __init__(self) -> None:
        self.nodes: list[PathTreeNode] = [PathTreeNode(name="")]

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> PathTreeNode:
        return self.nodes[index]

    def children(self, index: int = ROOT) -> list[PathTreeNode]:
        """Child nodes of the node at *index*, in insertion order."""
        return [self.nodes[child] for child in self.nodes[index].children]

    # ------------------------------------------------------------------ #
    # Merging
    # ------------------------------------------------------------------ #

    def attach(self, request: CompiledRequest) -> int:
        """File *request* under its path and return the new leaf's index.

        Every path segment except the last names a group: an existing child
        group with that name is reused, otherwise a new empty group is
        appended. The leaf itself is never merged with existing leaves.
        """
        current = ROOT
        for segment in request.url.path[:-1]:
            current = self._ensure_group(current, segment)
        return self._append(current, PathTreeNode(name=request.name, request=request))

    def find_group(self, parent: int, name: str) -> Optional[int]:
        """Index of the child group of *parent* called *name*, if any."""
        for child in self.nodes[parent].children:
            node = self.nodes[child]
            if node.is_group and node.name == name:
                return child
        return None

    def find(self, segments: Sequence[str]) -> Optional[int]:
        """Index of the group reached by following *segments* from the root."""
        current: Optional[int] = ROOT
        for segment in segments:
            current = self.find_group(current, segment)
            if current is None:
                return None
        return current

    def _ensure_group(self, parent: int, name: str) -> int:
        found = self.find_group(parent, name)
        if found is not None:
            return found
        logger.debug("Creating group '%s'", name)
        return self._append(parent, PathTreeNode(name=name))

    def _append(self, parent: int, node: PathTreeNode) -> int:
        index = len(self.nodes)
        self.nodes.append(node)
        self.nodes[parent].children.append(index)
        return index

    # ------------------------------------------------------------------ #
    # Traversal
    # ------------------------------------------------------------------ #

    def walk(self, index: int = ROOT, depth: int = 0) -> Iterator[tuple[int, PathTreeNode]]:
        """Depth-first ``(depth, node)`` pairs below *index* (the node itself excluded)."""
        for child in self.nodes[index].children:
            node = self.nodes[child]
            yield depth, node
            yield from self.walk(child, depth + 1)

    def iter_requests(self) -> Iterator[CompiledRequest]:
        """All attached requests, depth-first in insertion order."""
        for _, node in self.walk():
            if node.request is not None:
                yield node.request

    def to_items(self, index: int = ROOT) -> list[dict[str, Any]]:
        """Postman ``item`` array for the children of *index*."""
        items: list[dict[str, Any]] = []
        for child in self.nodes[index].children:
            node = self.nodes[child]
            if node.request is None:
                items.append({"name": node.name, "item": self.to_items(child)})
            else:
                items.append({
                    "name": node.name,
                    "request": node.request.to_postman(),
                    "response": [],
                })
        return items
