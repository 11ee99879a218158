"""
Single-file chunking pipeline.

parse -> extract entities -> scope tree -> windows -> context -> formatted
chunks. Everything here runs sequentially on the calling thread.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from ..errors import UnsupportedLanguageError
from ..languages import detect_language
from ..logger import get_logger
from ..models import UNKNOWN_TOTAL, ChunkOptions, CodeChunk, Language, ParseError
from ..parser import parse
from .context import build_chunk_context, format_chunk_with_context, overlap_from
from .extract import extract_entities
from .scope import ScopeTree, build_scope_tree
from .windowing import Window, build_windows, rebuild_text

log = get_logger(__name__)


def resolve_language(filepath: str, options: ChunkOptions) -> Language:
    """Explicit override first, then the file extension."""
    if options.language is not None:
        return options.language
    language = detect_language(filepath)
    if language is None:
        raise UnsupportedLanguageError(filepath=filepath)
    return language


@dataclass
class PreparedSource:
    """A parsed file together with the structures every chunk reads from."""

    filepath: str
    code: bytes
    language: Language
    options: ChunkOptions
    root: object
    scope_tree: ScopeTree
    parse_error: Optional[ParseError] = None

    def windows(self) -> List[Window]:
        return build_windows(self.root, self.code, self.options.max_chunk_size)


def prepare_source(filepath: str, code: bytes, options: Optional[ChunkOptions] = None) -> PreparedSource:
    options = options or ChunkOptions()
    language = resolve_language(filepath, options)
    result = parse(code, language)
    root = result.tree.root_node
    entities = extract_entities(root, language, code)
    return PreparedSource(
        filepath=filepath,
        code=code,
        language=language,
        options=options,
        root=root,
        scope_tree=build_scope_tree(entities),
        parse_error=result.error,
    )


def iter_chunks(
    source: PreparedSource, windows: Sequence[Window], total_chunks: int
) -> Iterator[CodeChunk]:
    """Turn ``windows`` into chunks, one at a time."""
    options = source.options
    previous_text = ""
    for index, window in enumerate(windows):
        rebuilt = rebuild_text(window, source.code)
        context = build_chunk_context(
            rebuilt.byte_range,
            source.scope_tree,
            options,
            source.filepath,
            source.language,
            parse_error=source.parse_error,
        )
        overlap = overlap_from(previous_text, options.overlap_lines) if index > 0 else ""
        yield CodeChunk(
            text=rebuilt.text,
            contextualized_text=format_chunk_with_context(rebuilt.text, context, overlap),
            byte_range=rebuilt.byte_range,
            line_range=rebuilt.line_range,
            context=context,
            index=index,
            total_chunks=total_chunks,
        )
        previous_text = rebuilt.text


def chunk_bytes(
    filepath: str, code: bytes, options: Optional[ChunkOptions] = None
) -> List[CodeChunk]:
    """
    Chunk raw UTF-8 ``code`` belonging to ``filepath``.

    Raises
    ------
    UnsupportedLanguageError
        When no language override is given and the extension is unknown, or
        the language has no grammar.
    ParseFailedError
        When the parser itself fails. Source with syntax errors is still
        chunked; every chunk then carries a recoverable ``parse_error``.
    """
    source = prepare_source(filepath, code, options)
    windows = source.windows()
    chunks = list(iter_chunks(source, windows, len(windows)))
    log.debug(
        "file_chunked",
        file=filepath,
        language=source.language.value,
        chunks=len(chunks),
        parse_error=source.parse_error is not None,
    )
    return chunks


def chunk(filepath: str, code: str, options: Optional[ChunkOptions] = None) -> List[CodeChunk]:
    """Chunk ``code``; see :func:`chunk_bytes`."""
    return chunk_bytes(filepath, code.encode("utf-8"), options)


def chunk_stream(
    filepath: str, code: str | bytes, options: Optional[ChunkOptions] = None
) -> Iterator[CodeChunk]:
    """
    Like :func:`chunk` but yields chunks lazily.

    Language resolution and parsing happen immediately, so errors surface at
    call time. Every yielded chunk has ``total_chunks == UNKNOWN_TOTAL``.
    """
    data = code.encode("utf-8") if isinstance(code, str) else code
    source = prepare_source(filepath, data, options)

    def generate() -> Iterator[CodeChunk]:
        yield from iter_chunks(source, source.windows(), UNKNOWN_TOTAL)

    return generate()


class Chunker:
    """Reusable chunker holding default options."""

    def __init__(self, options: Optional[ChunkOptions] = None) -> None:
        self.options = options or ChunkOptions()

    def _options_for(self, options: Optional[ChunkOptions]) -> ChunkOptions:
        return self.options.merged_with(options)

    def chunk(
        self, filepath: str, code: str | bytes, options: Optional[ChunkOptions] = None
    ) -> List[CodeChunk]:
        data = code.encode("utf-8") if isinstance(code, str) else code
        return chunk_bytes(filepath, data, self._options_for(options))

    def chunk_stream(
        self, filepath: str, code: str | bytes, options: Optional[ChunkOptions] = None
    ) -> Iterator[CodeChunk]:
        return chunk_stream(filepath, code, self._options_for(options))

    def chunk_file(self, path: Path | str, options: Optional[ChunkOptions] = None) -> List[CodeChunk]:
        """Read ``path`` from disk and chunk it."""
        path = Path(path)
        return chunk_bytes(str(path), path.read_bytes(), self._options_for(options))
