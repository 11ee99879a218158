"""
Per-chunk context resolution and the deterministic text header.
"""
from __future__ import annotations

from typing import List, Optional

from ..models import (
    ByteRange,
    ChunkContext,
    ChunkEntityInfo,
    ChunkOptions,
    EntityInfo,
    EntityType,
    ImportInfo,
    Language,
    ParseError,
    SiblingDetail,
    SiblingInfo,
)
from .scope import ScopeTree

MAX_SIBLINGS = 3
MAX_IMPORTS_SHOWN = 10
PATH_SEGMENTS_SHOWN = 3
OVERLAP_START_MARKER = "# ..."
OVERLAP_END_MARKER = "# ---"

_NON_SCOPE_TYPES = (EntityType.IMPORT, EntityType.EXPORT)


def get_scope_for_range(byte_range: ByteRange, tree: ScopeTree) -> List[EntityInfo]:
    """Scope chain at the start of ``byte_range``, innermost first."""
    node = tree.scope_at_offset(byte_range.start)
    if node is None:
        return []
    chain = [node, *tree.ancestor_chain(node)]
    return [
        EntityInfo(name=item.entity.name, type=item.entity.type, signature=item.entity.signature)
        for item in chain
    ]


def get_entities_in_range(byte_range: ByteRange, tree: ScopeTree) -> List[ChunkEntityInfo]:
    entities: List[ChunkEntityInfo] = []
    for entity in tree.all_entities:
        if not entity.byte_range.overlaps(byte_range):
            continue
        entities.append(
            ChunkEntityInfo(
                name=entity.name,
                type=entity.type,
                signature=entity.signature,
                docstring=entity.docstring,
                line_range=entity.line_range,
                is_partial=not byte_range.contains(entity.byte_range),
            )
        )
    return entities


def get_siblings(
    byte_range: ByteRange,
    tree: ScopeTree,
    detail: SiblingDetail,
    max_siblings: int = MAX_SIBLINGS,
) -> List[SiblingInfo]:
    """
    Entities surrounding ``byte_range``.

    Preceding siblings are ranked from the closest one outwards, so distance 1
    is always the entity right next to the chunk on either side.
    """
    if detail == "none":
        return []

    candidates = [entity for entity in tree.all_entities if entity.type not in _NON_SCOPE_TYPES]
    before = [entity for entity in candidates if entity.byte_range.end <= byte_range.start]
    after = [entity for entity in candidates if entity.byte_range.start >= byte_range.end]
    before.sort(key=lambda entity: entity.byte_range.end, reverse=True)

    def describe(entity, position, distance) -> SiblingInfo:
        return SiblingInfo(
            name=entity.name,
            type=entity.type,
            position=position,
            distance=distance,
            signature=entity.signature if detail == "signatures" else None,
        )

    siblings = [
        describe(entity, "before", distance)
        for distance, entity in enumerate(before[:max_siblings], start=1)
    ]
    siblings.extend(
        describe(entity, "after", distance)
        for distance, entity in enumerate(after[:max_siblings], start=1)
    )
    return siblings


def get_relevant_imports(
    entities: List[ChunkEntityInfo], tree: ScopeTree, filter_imports: bool
) -> List[ImportInfo]:
    imports: List[ImportInfo] = []
    for entity in tree.imports:
        info = ImportInfo(name=entity.name, source=entity.source or "")
        if not filter_imports:
            imports.append(info)
            continue
        # Substring match on signatures; short names may over-match.
        if any(
            candidate.name == entity.name or entity.name in candidate.signature
            for candidate in entities
        ):
            imports.append(info)
    return imports


def build_chunk_context(
    byte_range: ByteRange,
    tree: ScopeTree,
    options: ChunkOptions,
    filepath: str,
    language: Optional[Language],
    parse_error: Optional[ParseError] = None,
) -> ChunkContext:
    """Assemble the context record for one chunk according to ``context_mode``."""
    if options.context_mode == "none":
        return ChunkContext(parse_error=parse_error)

    context = ChunkContext(
        filepath=filepath,
        language=language,
        scope=get_scope_for_range(byte_range, tree),
        entities=get_entities_in_range(byte_range, tree),
        parse_error=parse_error,
    )
    if options.context_mode == "full":
        context.siblings = get_siblings(byte_range, tree, options.sibling_detail)
        context.imports = get_relevant_imports(context.entities, tree, options.filter_imports)
    return context


def last_path_segments(path: str, count: int = PATH_SEGMENTS_SHOWN) -> str:
    parts = path.replace("\\", "/").split("/")
    if len(parts) <= count:
        return path
    return "/".join(parts[-count:])


def overlap_from(previous_text: str, overlap_lines: int) -> str:
    """Trailing ``overlap_lines`` lines of the previous chunk's raw text."""
    if overlap_lines <= 0 or not previous_text:
        return ""
    return "\n".join(previous_text.split("\n")[-overlap_lines:])


def format_chunk_with_context(text: str, context: ChunkContext, overlap_text: str = "") -> str:
    """
    Render ``text`` with a comment header describing where it lives.

    Layout, each line optional::

        # <last path segments>
        # Scope: outer > inner
        # Defines: <signatures>
        # Uses: <import names>
        # After: <preceding siblings>
        # Before: <following siblings>

        # ...
        <overlap>
        # ---
        <text>
    """
    header: List[str] = []

    if context.filepath:
        header.append(f"# {last_path_segments(context.filepath)}")

    if context.scope:
        outer_to_inner = [item.name for item in reversed(context.scope)]
        header.append("# Scope: " + " > ".join(outer_to_inner))

    signatures = [
        entity.signature
        for entity in context.entities
        if entity.signature and entity.type != EntityType.IMPORT
    ]
    if signatures:
        header.append("# Defines: " + ", ".join(signatures))

    if context.imports:
        names = [item.name for item in context.imports[:MAX_IMPORTS_SHOWN]]
        header.append("# Uses: " + ", ".join(names))

    preceding = [item.name for item in context.siblings if item.position == "before"]
    following = [item.name for item in context.siblings if item.position == "after"]
    if preceding:
        header.append("# After: " + ", ".join(preceding))
    if following:
        header.append("# Before: " + ", ".join(following))

    parts = header
    if header:
        parts.append("")
    if overlap_text:
        parts.extend([OVERLAP_START_MARKER, overlap_text, OVERLAP_END_MARKER])
    parts.append(text)
    return "\n".join(parts)
