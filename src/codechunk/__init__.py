"""
Syntax-aware source chunking for embedding and retrieval pipelines.
"""

from .chunking import Chunker, chunk, chunk_bytes, chunk_stream, format_chunk_with_context
from .errors import BatchCancelledError, CodeChunkError, ParseFailedError, UnsupportedLanguageError
from .languages import detect_language, is_language_supported, supported_languages
from .models import (
    UNKNOWN_TOTAL,
    BatchOptions,
    BatchResult,
    ChunkContext,
    ChunkOptions,
    CodeChunk,
    FileInput,
    Language,
)
from .parser import clear_grammar_cache
from .services import chunk_batch, chunk_batch_stream
from .version import __version__

__all__ = [
    "BatchCancelledError",
    "BatchOptions",
    "BatchResult",
    "ChunkContext",
    "ChunkOptions",
    "Chunker",
    "CodeChunk",
    "CodeChunkError",
    "FileInput",
    "Language",
    "ParseFailedError",
    "UNKNOWN_TOTAL",
    "UnsupportedLanguageError",
    "__version__",
    "chunk",
    "chunk_batch",
    "chunk_batch_stream",
    "chunk_bytes",
    "chunk_stream",
    "clear_grammar_cache",
    "detect_language",
    "format_chunk_with_context",
    "is_language_supported",
    "supported_languages",
]
