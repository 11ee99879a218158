"""Documentation extraction: in-body string literals or leading doc comments."""
from __future__ import annotations

from typing import Callable, Dict, Optional

from tree_sitter import Node

from ..languages import DocstringStyle, LanguageConfig
from .nodes import node_text
from .signature import find_body_node

COMMENT_NODE_TYPES = frozenset(
    {
        "comment",
        "line_comment",
        "block_comment",
        "documentation_comment",
        "string",
        "string_literal",
        "expression_statement",
    }
)

_STRING_DELIMITERS = ('"""', "'''")


def is_doc_comment(text: str, config: LanguageConfig) -> bool:
    return text.strip().startswith(config.doc_comment_prefixes)


def clean_doc_comment(text: str, config: LanguageConfig) -> str:
    """Strip comment markers line by line and join the remaining text with spaces."""
    text = text.strip()
    if not config.doc_comment_markers:
        return text

    lines = []
    for line in text.split("\n"):
        line = line.strip()
        for marker in config.doc_comment_markers:
            line = line.removeprefix(marker)
        line = line.removesuffix("*/").removeprefix("*").strip()
        if line:
            lines.append(line)
    return " ".join(lines)


def _strip_string_delimiters(text: str) -> str:
    for delimiter in _STRING_DELIMITERS:
        text = text.removeprefix(delimiter)
    for delimiter in _STRING_DELIMITERS:
        text = text.removesuffix(delimiter)
    return text.strip()


def _body_string_docstring(node: Node, config: LanguageConfig, code: bytes) -> Optional[str]:
    body = find_body_node(node)
    if body is None or body.child_count == 0:
        return None

    # Newer Python grammars put the string directly under the block.
    literal = body.child(0)
    if literal is not None and literal.type == "expression_statement":
        literal = literal.child(0) if literal.child_count else None
    if literal is None or literal.type != "string":
        return None

    docstring = _strip_string_delimiters(node_text(literal, code))
    return docstring or None


def _leading_comment_docstring(node: Node, config: LanguageConfig, code: bytes) -> Optional[str]:
    previous = node.prev_sibling
    if previous is None or previous.type not in COMMENT_NODE_TYPES:
        return None

    comment = node_text(previous, code)
    if not is_doc_comment(comment, config):
        return None

    docstring = clean_doc_comment(comment, config)
    return docstring or None


_EXTRACTORS: Dict[DocstringStyle, Callable[[Node, LanguageConfig, bytes], Optional[str]]] = {
    DocstringStyle.BODY_STRING: _body_string_docstring,
    DocstringStyle.LEADING_COMMENT: _leading_comment_docstring,
}


def extract_docstring(node: Node, config: LanguageConfig, code: bytes) -> Optional[str]:
    """Documentation attached to ``node``, or None."""
    return _EXTRACTORS[config.docstring_style](node, config, code)
