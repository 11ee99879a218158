"""
Import statement expansion.

An import or use statement becomes one entity per imported symbol. Every
entity spans the whole statement and carries the statement's source module.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from tree_sitter import Node

from ..models import ByteRange, EntityType, ExtractedEntity, Language, LineRange
from .nodes import iter_children, node_text
from .signature import clean_signature

FALLBACK_IMPORT_NAME = "import"
FALLBACK_USE_NAME = "use"

_SOURCE_NODE_TYPES = ("string", "string_literal", "interpreted_string_literal", "source")


def strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
        return text[1:-1]
    return text


def create_import_entity(node: Node, name: str, source: str, code: bytes) -> ExtractedEntity:
    return ExtractedEntity(
        type=EntityType.IMPORT,
        name=name,
        signature=clean_signature(node_text(node, code)),
        byte_range=ByteRange(node.start_byte, node.end_byte),
        line_range=LineRange(node.start_point.row, node.end_point.row),
        source=source or None,
        node=node,
    )


# --- import source resolution -------------------------------------------------


def _js_source(node: Node, code: bytes) -> Optional[str]:
    for child in iter_children(node):
        if child.type == "string":
            return strip_quotes(node_text(child, code))
    return None


def _python_source(node: Node, code: bytes) -> Optional[str]:
    for field_name in ("module_name", "name"):
        field_node = node.child_by_field_name(field_name)
        if field_node is not None:
            return node_text(field_node, code)
    for child in iter_children(node):
        if child.type == "dotted_name":
            return node_text(child, code)
    return None


def _go_spec_path(spec: Node, code: bytes) -> Optional[str]:
    path = spec.child_by_field_name("path")
    if path is not None:
        return strip_quotes(node_text(path, code))
    for child in iter_children(spec):
        if child.type == "interpreted_string_literal":
            return strip_quotes(node_text(child, code))
    return None


def _go_source(node: Node, code: bytes) -> Optional[str]:
    for child in iter_children(node):
        if child.type == "import_spec":
            path = _go_spec_path(child, code)
            if path is not None:
                return path
        elif child.type == "interpreted_string_literal":
            return strip_quotes(node_text(child, code))
        elif child.type == "import_spec_list":
            for spec in iter_children(child):
                if spec.type == "import_spec":
                    path = spec.child_by_field_name("path")
                    if path is not None:
                        return strip_quotes(node_text(path, code))
    return None


def _rust_use_path(node: Node, code: bytes) -> str:
    if node.type == "use_list":
        return ""
    if node.type == "scoped_use_list":
        path = node.child_by_field_name("path")
        return node_text(path, code) if path is not None else ""
    if node.type == "scoped_identifier" and node.child_count:
        last = node.child(node.child_count - 1)
        if last is not None and last.type == "use_list":
            path = node.child_by_field_name("path")
            if path is not None:
                return node_text(path, code)
    return node_text(node, code)


def _rust_source(node: Node, code: bytes) -> Optional[str]:
    argument = node.child_by_field_name("argument")
    if argument is not None:
        return _rust_use_path(argument, code)
    for child in iter_children(node):
        if child.type in ("scoped_identifier", "identifier", "use_wildcard"):
            return _rust_use_path(child, code)
    return None


def _java_source(node: Node, code: bytes) -> Optional[str]:
    for child in iter_children(node):
        if child.type == "scoped_identifier":
            return node_text(child, code)
    return None


_SOURCE_RESOLVERS: Dict[Language, Callable[[Node, bytes], Optional[str]]] = {
    Language.TYPESCRIPT: _js_source,
    Language.JAVASCRIPT: _js_source,
    Language.PYTHON: _python_source,
    Language.GO: _go_source,
    Language.RUST: _rust_source,
    Language.JAVA: _java_source,
}


def extract_import_source(node: Node, language: Language, code: bytes) -> str:
    """Module path an import statement refers to, or "" when none is found."""
    source_field = node.child_by_field_name("source")
    if source_field is not None:
        return strip_quotes(node_text(source_field, code))

    resolver = _SOURCE_RESOLVERS.get(language)
    if resolver is not None:
        source = resolver(node, code)
        if source is not None:
            return source

    for child in iter_children(node):
        if child.type in _SOURCE_NODE_TYPES:
            return strip_quotes(node_text(child, code))
    return ""


# --- symbol expansion ---------------------------------------------------------


def import_specifier_name(spec: Node, code: bytes) -> str:
    for field_name in ("alias", "name"):
        field_node = spec.child_by_field_name(field_name)
        if field_node is not None:
            return node_text(field_node, code)
    for child in iter_children(spec):
        if child.type == "identifier":
            return node_text(child, code)
    return ""


def _js_symbols(node: Node, source: str, code: bytes) -> List[ExtractedEntity]:
    entities: List[ExtractedEntity] = []
    for child in iter_children(node):
        if child.type != "import_clause":
            continue
        for clause_child in iter_children(child):
            if clause_child.type == "identifier":
                entities.append(create_import_entity(node, node_text(clause_child, code), source, code))
            elif clause_child.type == "named_imports":
                for spec in iter_children(clause_child):
                    if spec.type != "import_specifier":
                        continue
                    name = import_specifier_name(spec, code)
                    if name:
                        entities.append(create_import_entity(node, name, source, code))
            elif clause_child.type == "namespace_import":
                alias = clause_child.child_by_field_name("alias")
                if alias is None:
                    alias = next(
                        (c for c in iter_children(clause_child) if c.type == "identifier"),
                        None,
                    )
                if alias is not None:
                    entities.append(create_import_entity(node, node_text(alias, code), source, code))
    return entities


def _python_import_name(node: Node, code: bytes) -> str:
    if node.type == "aliased_import":
        for field_name in ("alias", "name"):
            field_node = node.child_by_field_name(field_name)
            if field_node is not None:
                return node_text(field_node, code)
    return node_text(node, code)


def _python_symbols(node: Node, source: str, code: bytes) -> List[ExtractedEntity]:
    entities: List[ExtractedEntity] = []
    if node.type == "import_statement":
        for child in iter_children(node):
            if child.type in ("dotted_name", "aliased_import"):
                name = _python_import_name(child, code)
                if name:
                    entities.append(create_import_entity(node, name, source, code))
    elif node.type == "import_from_statement":
        module_name = node.child_by_field_name("module_name")
        for child in iter_children(node):
            if module_name is not None and child.start_byte == module_name.start_byte:
                continue
            if child.type == "aliased_import":
                name = _python_import_name(child, code)
                if name:
                    entities.append(create_import_entity(node, name, source, code))
            elif child.type in ("identifier", "dotted_name"):
                name = node_text(child, code)
                if name not in ("from", "import"):
                    entities.append(create_import_entity(node, name, source, code))
            elif child.type == "wildcard_import":
                entities.append(create_import_entity(node, "*", source, code))
    return entities


def _go_spec(spec: Node, code: bytes) -> tuple[str, str]:
    name = ""
    source = ""
    alias = spec.child_by_field_name("name")
    if alias is not None:
        name = node_text(alias, code)
    path = spec.child_by_field_name("path")
    if path is not None:
        source = strip_quotes(node_text(path, code))
        if not name:
            name = source.rsplit("/", 1)[-1]
    return name or FALLBACK_IMPORT_NAME, source


def _go_symbols(node: Node, source: str, code: bytes) -> List[ExtractedEntity]:
    specs: List[Node] = []
    for child in iter_children(node):
        if child.type == "import_spec":
            specs.append(child)
        elif child.type == "import_spec_list":
            specs.extend(spec for spec in iter_children(child) if spec.type == "import_spec")

    entities: List[ExtractedEntity] = []
    for spec in specs:
        name, spec_source = _go_spec(spec, code)
        entities.append(create_import_entity(node, name, spec_source, code))
    return entities


def _rust_use_items(
    item: Node, statement: Node, source: str, code: bytes, out: List[ExtractedEntity]
) -> None:
    # Explicit stack; use trees nest arbitrarily (``a::{b::{c, d}, e}``).
    stack = [item]
    while stack:
        current = stack.pop()
        if current.type == "use_list":
            children = [
                child for child in iter_children(current) if child.type not in (",", "{", "}")
            ]
            stack.extend(reversed(children))
        elif current.type == "scoped_use_list":
            use_list = current.child_by_field_name("list")
            if use_list is not None:
                stack.append(use_list)
        elif current.type == "scoped_identifier":
            name = node_text(current, code).rsplit("::", 1)[-1]
            out.append(create_import_entity(statement, name, source, code))
        elif current.type == "identifier":
            out.append(create_import_entity(statement, node_text(current, code), source, code))
        elif current.type == "use_as_clause":
            alias = current.child_by_field_name("alias")
            if alias is not None:
                out.append(create_import_entity(statement, node_text(alias, code), source, code))
        elif current.type == "use_wildcard":
            out.append(create_import_entity(statement, "*", source, code))


def _rust_symbols(node: Node, source: str, code: bytes) -> List[ExtractedEntity]:
    entities: List[ExtractedEntity] = []
    argument = node.child_by_field_name("argument")
    if argument is not None:
        _rust_use_items(argument, node, source, code, entities)
    return entities


def _java_symbols(node: Node, source: str, code: bytes) -> List[ExtractedEntity]:
    name = source.rsplit(".", 1)[-1] if source else FALLBACK_IMPORT_NAME
    return [create_import_entity(node, name, source, code)]


_SYMBOL_EXPANDERS: Dict[Language, Callable[[Node, str, bytes], List[ExtractedEntity]]] = {
    Language.TYPESCRIPT: _js_symbols,
    Language.JAVASCRIPT: _js_symbols,
    Language.PYTHON: _python_symbols,
    Language.GO: _go_symbols,
    Language.RUST: _rust_symbols,
    Language.JAVA: _java_symbols,
}


def extract_import_symbols(node: Node, language: Language, code: bytes) -> List[ExtractedEntity]:
    """One import entity per symbol brought into scope by ``node``."""
    source = extract_import_source(node, language, code)
    expander = _SYMBOL_EXPANDERS.get(language)
    entities = expander(node, source, code) if expander is not None else []
    if not entities:
        fallback = FALLBACK_USE_NAME if language is Language.RUST else FALLBACK_IMPORT_NAME
        entities = [create_import_entity(node, fallback, source, code)]
    return entities
