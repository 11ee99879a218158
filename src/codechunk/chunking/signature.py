"""
Signature extraction.

The structural route slices the node's text up to its body node. When a node
has no recognisable body, a bracket-depth scan finds the first body delimiter
(``{`` or ``:``) outside parentheses, brackets, generics and string literals.
"""
from __future__ import annotations

import re

from tree_sitter import Node

from ..languages import LanguageConfig
from ..models import EntityType
from .nodes import first_child_of_type, node_text

BODY_NODE_TYPES = (
    "block",
    "statement_block",
    "class_body",
    "interface_body",
    "enum_body",
)

_QUOTES = ('"', "'", "`")
_WHITESPACE_RUN = re.compile(r"[ \t\r\n]+")


def _is_ident_start(char: str) -> bool:
    return char.isascii() and (char.isalpha() or char == "_")


def find_body_delimiter_pos(text: str, delimiter: str) -> int:
    """Index of the first ``delimiter`` at nesting depth zero, or -1."""
    paren_depth = bracket_depth = angle_depth = 0
    string_char = ""

    for index, char in enumerate(text):
        prev_char = text[index - 1] if index > 0 else ""

        if char in _QUOTES and prev_char != "\\":
            if not string_char:
                string_char = char
            elif char == string_char:
                string_char = ""
            continue
        if string_char:
            continue

        if char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth -= 1
        elif char == "[":
            bracket_depth += 1
        elif char == "]":
            bracket_depth -= 1
        elif char == "<":
            # Only generics open an angle scope; ``a < b`` does not.
            if index + 1 < len(text):
                next_char = text[index + 1]
                if _is_ident_start(next_char) or next_char in "> <":
                    angle_depth += 1
        elif char == ">":
            if angle_depth > 0:
                angle_depth -= 1

        if char == delimiter and paren_depth == 0 and bracket_depth == 0 and angle_depth == 0:
            return index

    return -1


def clean_signature(signature: str) -> str:
    """Collapse line breaks and whitespace runs into single spaces and trim."""
    return _WHITESPACE_RUN.sub(" ", signature).strip()


def _first_line(text: str) -> str:
    return text.split("\n", 1)[0]


def find_body_node(node: Node) -> Node | None:
    body = node.child_by_field_name("body")
    if body is None:
        body = first_child_of_type(node, BODY_NODE_TYPES)
    return body


def signature_from_body(node: Node, code: bytes, config: LanguageConfig) -> str:
    """Text between the node start and its body, or "" when no body exists."""
    body = find_body_node(node)
    if body is None:
        return ""

    signature = code[node.start_byte : body.start_byte].decode("utf-8", errors="replace").strip()
    if config.indentation_based and signature.endswith(":"):
        signature = signature[:-1]
    if signature.endswith("=>"):
        signature = signature[:-2].strip()
    return clean_signature(signature)


def _signature_up_to(text: str, delimiter_pos: int) -> str:
    return clean_signature(text[:delimiter_pos].strip())


def _function_signature(node: Node, code: bytes, config: LanguageConfig) -> str:
    signature = signature_from_body(node, code, config)
    if signature:
        return signature

    text = node_text(node, code)
    delimiter_pos = find_body_delimiter_pos(text, config.body_delimiter)
    if delimiter_pos == -1:
        return clean_signature(text)
    return _signature_up_to(text, delimiter_pos)


def _class_signature(node: Node, code: bytes, config: LanguageConfig) -> str:
    signature = signature_from_body(node, code, config)
    if signature:
        return signature

    text = node_text(node, code)
    delimiter_pos = find_body_delimiter_pos(text, config.body_delimiter)
    if delimiter_pos == -1:
        return clean_signature(_first_line(text))
    return _signature_up_to(text, delimiter_pos)


def _type_signature(node: Node, code: bytes, config: LanguageConfig) -> str:
    text = node_text(node, code)

    candidates = [text.find("="), find_body_delimiter_pos(text, "{")]
    if config.indentation_based:
        candidates.append(find_body_delimiter_pos(text, ":"))
    positions = [pos for pos in candidates if pos != -1]

    if not positions:
        return clean_signature(_first_line(text))
    return _signature_up_to(text, min(positions))


def extract_signature(
    node: Node, entity_type: EntityType, config: LanguageConfig, code: bytes
) -> str:
    """One-line signature of ``node`` according to its entity kind."""
    if entity_type in (EntityType.FUNCTION, EntityType.METHOD):
        return _function_signature(node, code, config)
    if entity_type in (EntityType.CLASS, EntityType.INTERFACE):
        return _class_signature(node, code, config)
    if entity_type in (EntityType.TYPE, EntityType.ENUM):
        return _type_signature(node, code, config)
    if entity_type in (EntityType.IMPORT, EntityType.EXPORT):
        return clean_signature(node_text(node, code))
    return clean_signature(_first_line(node_text(node, code)))
