"""
Scope tree over extracted entities.

Nodes live in one list owned by the :class:`ScopeTree`; parent and child links
are indices into that list, so the upward links never own anything.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from ..models import ByteRange, EntityType, ExtractedEntity


def range_contains(outer: ByteRange, inner: ByteRange) -> bool:
    return outer.start <= inner.start and inner.end <= outer.end


@dataclass
class ScopeNode:
    entity: ExtractedEntity
    index: int
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


@dataclass
class ScopeTree:
    nodes: List[ScopeNode] = field(default_factory=list)
    roots: List[int] = field(default_factory=list)
    imports: List[ExtractedEntity] = field(default_factory=list)
    exports: List[ExtractedEntity] = field(default_factory=list)
    all_entities: List[ExtractedEntity] = field(default_factory=list)

    def root_nodes(self) -> List[ScopeNode]:
        return [self.nodes[index] for index in self.roots]

    def children_of(self, node: ScopeNode) -> List[ScopeNode]:
        return [self.nodes[index] for index in node.children]

    def parent_of(self, node: ScopeNode) -> Optional[ScopeNode]:
        return self.nodes[node.parent] if node.parent is not None else None

    def _deepest_container(self, target: ByteRange) -> Optional[ScopeNode]:
        candidates = self.roots
        found: Optional[ScopeNode] = None
        while True:
            match = next(
                (
                    self.nodes[index]
                    for index in candidates
                    if range_contains(self.nodes[index].entity.byte_range, target)
                ),
                None,
            )
            if match is None:
                return found
            found = match
            candidates = match.children

    def add(self, entity: ExtractedEntity) -> ScopeNode:
        """Attach ``entity`` under the deepest node containing it, or as a new root."""
        parent = self._deepest_container(entity.byte_range)
        node = ScopeNode(
            entity=entity,
            index=len(self.nodes),
            parent=parent.index if parent is not None else None,
        )
        self.nodes.append(node)
        if parent is not None:
            parent.children.append(node.index)
        else:
            self.roots.append(node.index)
        return node

    def scope_at_offset(self, offset: int) -> Optional[ScopeNode]:
        """Innermost scope whose range contains ``offset`` (end exclusive)."""
        candidates = self.roots
        found: Optional[ScopeNode] = None
        while True:
            match = next(
                (
                    self.nodes[index]
                    for index in candidates
                    if self.nodes[index].entity.byte_range.start
                    <= offset
                    < self.nodes[index].entity.byte_range.end
                ),
                None,
            )
            if match is None:
                return found
            found = match
            candidates = match.children

    def ancestor_chain(self, node: ScopeNode) -> List[ScopeNode]:
        """Ancestors of ``node``, nearest first."""
        ancestors: List[ScopeNode] = []
        current = self.parent_of(node)
        while current is not None:
            ancestors.append(current)
            current = self.parent_of(current)
        return ancestors

    def walk(self) -> Iterator[ScopeNode]:
        """Pre-order traversal of every scope node."""
        stack = list(reversed(self.roots))
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def flatten(self) -> List[ScopeNode]:
        return list(self.walk())


def build_scope_tree(entities: Sequence[ExtractedEntity]) -> ScopeTree:
    """Build the containment forest of non-import, non-export entities."""
    tree = ScopeTree(all_entities=list(entities))
    scoped: List[ExtractedEntity] = []
    for entity in entities:
        if entity.type == EntityType.IMPORT:
            tree.imports.append(entity)
        elif entity.type == EntityType.EXPORT:
            tree.exports.append(entity)
        else:
            scoped.append(entity)

    for entity in sorted(scoped, key=lambda e: e.byte_range.start):
        tree.add(entity)
    return tree
