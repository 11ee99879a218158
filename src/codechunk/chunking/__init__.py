"""
Syntax-aware chunking.

Splits source files at function, class and method boundaries into
size-bounded chunks and annotates each chunk with its surrounding structure.
"""

from .chunker import Chunker, chunk, chunk_bytes, chunk_stream
from .context import format_chunk_with_context
from .extract import extract_entities
from .scope import ScopeNode, ScopeTree, build_scope_tree

__all__ = [
    "Chunker",
    "ScopeNode",
    "ScopeTree",
    "build_scope_tree",
    "chunk",
    "chunk_bytes",
    "chunk_stream",
    "extract_entities",
    "format_chunk_with_context",
]
