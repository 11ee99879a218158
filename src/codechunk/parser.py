"""
Parsing front-end over tree-sitter.

Grammars come prebuilt from ``tree_sitter_language_pack`` and are cached
process-wide. The cache is filled lazily under a lock; once a grammar is
present, lookups read the dictionary without taking the lock.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from tree_sitter import Language as Grammar, Parser, Tree
from tree_sitter_language_pack import get_language

from .errors import ParseFailedError, UnsupportedLanguageError
from .languages import LANGUAGE_CONFIGS, coerce_language
from .logger import get_logger
from .models import Language, ParseError

log = get_logger(__name__)

PARSE_ERROR_MESSAGE = "parse error in source code"

_GRAMMAR_CACHE: Dict[Language, Grammar] = {}
_GRAMMAR_LOCK = threading.Lock()


@dataclass
class ParseResult:
    tree: Tree
    error: Optional[ParseError] = None


def get_grammar(language: "Language | str") -> Grammar:
    """Return the cached grammar for ``language``, loading it on first use."""
    resolved = coerce_language(language)
    if resolved is None or resolved not in LANGUAGE_CONFIGS:
        raise UnsupportedLanguageError(str(language))

    grammar = _GRAMMAR_CACHE.get(resolved)
    if grammar is not None:
        return grammar

    with _GRAMMAR_LOCK:
        grammar = _GRAMMAR_CACHE.get(resolved)
        if grammar is None:
            grammar_name = LANGUAGE_CONFIGS[resolved].grammar
            grammar = get_language(grammar_name)
            _GRAMMAR_CACHE[resolved] = grammar
            log.debug("grammar_loaded", language=resolved.value, grammar=grammar_name)
    return grammar


def clear_grammar_cache() -> None:
    """Drop every cached grammar; the next parse reloads what it needs."""
    with _GRAMMAR_LOCK:
        _GRAMMAR_CACHE.clear()
    log.debug("grammar_cache_cleared")


def parse(code: bytes, language: "Language | str") -> ParseResult:
    """
    Parse ``code`` with the grammar for ``language``.

    A tree that contains syntax errors is still returned, together with a
    recoverable :class:`ParseError` note. Only a failure of the parser itself
    raises :class:`ParseFailedError`.
    """
    grammar = get_grammar(language)
    resolved = coerce_language(language)
    try:
        # Parsers are not thread-safe; grammars are.
        tree = Parser(grammar).parse(code)
    except Exception as exc:
        raise ParseFailedError(str(resolved), str(exc)) from exc
    if tree is None:
        raise ParseFailedError(str(resolved), "parser returned no tree")

    result = ParseResult(tree=tree)
    if has_parse_errors(tree):
        result.error = ParseError(message=PARSE_ERROR_MESSAGE, recoverable=True)
        log.debug("parse_error_recovered", language=str(resolved))
    return result


def has_parse_errors(tree: Optional[Tree]) -> bool:
    return tree is not None and tree.root_node.has_error
