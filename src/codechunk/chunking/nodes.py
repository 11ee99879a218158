"""Small helpers over tree-sitter nodes shared by the extraction heuristics."""
from __future__ import annotations

from typing import Iterable, Iterator, Optional

from tree_sitter import Node


def node_text(node: Node, code: bytes) -> str:
    return code[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def iter_children(node: Node) -> Iterator[Node]:
    for index in range(node.child_count):
        child = node.child(index)
        if child is not None:
            yield child


def first_child_of_type(node: Node, types: Iterable[str]) -> Optional[Node]:
    wanted = set(types)
    for child in iter_children(node):
        if child.type in wanted:
            return child
    return None


def is_leaf(node: Node) -> bool:
    return node.child_count == 0
