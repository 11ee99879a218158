"""
Entity extraction.

Walks the syntax tree with an explicit stack (generated or minified code can
nest deeper than the interpreter's recursion limit) and emits entities in
document order.
"""
from __future__ import annotations

from typing import List, Optional, Set, Tuple

from tree_sitter import Node

from ..languages import LanguageConfig, get_language_config, resolve_entity_type
from ..logger import get_logger
from ..models import ByteRange, EntityType, ExtractedEntity, Language, LineRange
from .docstring import extract_docstring
from .imports import extract_import_symbols
from .nodes import iter_children, node_text
from .signature import extract_signature

log = get_logger(__name__)

ANONYMOUS_NAME = "<anonymous>"

NAME_NODE_TYPES = ("name", "identifier", "type_identifier", "property_identifier")

_NESTING_TYPES = frozenset(
    {EntityType.CLASS, EntityType.INTERFACE, EntityType.FUNCTION, EntityType.METHOD}
)


def extract_name(node: Node, code: bytes) -> str:
    """Entity name from a name-like field or the first identifier-like child."""
    for field_name in NAME_NODE_TYPES:
        name_node = node.child_by_field_name(field_name)
        if name_node is not None:
            return node_text(name_node, code)

    for child in iter_children(node):
        if child.type in NAME_NODE_TYPES:
            return node_text(child, code)

    # Go wraps the name one level down: type_declaration > type_spec.
    for child in iter_children(node):
        name_node = child.child_by_field_name("name")
        if name_node is not None:
            return node_text(name_node, code)

    return ""


def _build_entity(
    node: Node,
    entity_type: EntityType,
    config: LanguageConfig,
    code: bytes,
    parent_name: Optional[str],
) -> ExtractedEntity:
    name = extract_name(node, code) or ANONYMOUS_NAME
    signature = extract_signature(node, entity_type, config, code) or name
    return ExtractedEntity(
        type=entity_type,
        name=name,
        signature=signature,
        docstring=extract_docstring(node, config, code),
        byte_range=ByteRange(node.start_byte, node.end_byte),
        line_range=LineRange(node.start_point.row, node.end_point.row),
        parent=parent_name,
        node=node,
    )


def extract_entities(root: Node, language: Language, code: bytes) -> List[ExtractedEntity]:
    """Flat, document-ordered list of the entities found under ``root``."""
    config = get_language_config(language)
    entities: List[ExtractedEntity] = []
    seen: Set[int] = set()
    stack: List[Tuple[Node, Optional[str]]] = [(root, None)]

    while stack:
        node, parent_name = stack.pop()
        child_parent = parent_name

        entity_type = resolve_entity_type(node.type, config)
        if entity_type is not None:
            if node.id in seen:
                continue
            seen.add(node.id)

            if entity_type is EntityType.IMPORT:
                # Import statements expand into symbols and are not descended into.
                entities.extend(extract_import_symbols(node, language, code))
                continue

            entity = _build_entity(node, entity_type, config, code, parent_name)
            entities.append(entity)
            if entity_type in _NESTING_TYPES:
                child_parent = entity.name

        children = list(iter_children(node))
        stack.extend((child, child_parent) for child in reversed(children))

    log.debug("entities_extracted", language=language.value, count=len(entities))
    return entities
