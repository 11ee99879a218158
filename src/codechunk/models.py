"""
Data model shared by every stage of the chunking pipeline.

Records produced by the pipeline are plain dataclasses; caller-facing option
objects are pydantic models so invalid values are rejected up front.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .settings import settings

UNKNOWN_TOTAL = -1
"""``total_chunks`` value used by streaming APIs, where the total is not known yet."""


class Language(StrEnum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    RUST = "rust"
    GO = "go"
    JAVA = "java"


class EntityType(StrEnum):
    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    ENUM = "enum"
    IMPORT = "import"
    EXPORT = "export"


ContextMode = Literal["none", "minimal", "full"]
SiblingDetail = Literal["none", "names", "signatures"]
SiblingPosition = Literal["before", "after"]
ProgressCallback = Callable[[int, int, str, bool], None]


@dataclass(frozen=True)
class LineRange:
    """0-indexed, inclusive line range."""

    start: int
    end: int


@dataclass(frozen=True)
class ByteRange:
    """0-indexed byte range, ``end`` exclusive."""

    start: int
    end: int

    def contains(self, other: "ByteRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: "ByteRange") -> bool:
        return self.start < other.end and self.end > other.start


@dataclass(frozen=True)
class ParseError:
    """Non-fatal note attached to chunks of a file whose tree has syntax errors."""

    message: str
    recoverable: bool = True


@dataclass(frozen=True)
class ExtractedEntity:
    """A syntactic construct of interest (function, class, import, ...)."""

    type: EntityType
    name: str
    signature: str
    byte_range: ByteRange
    line_range: LineRange
    docstring: Optional[str] = None
    parent: Optional[str] = None
    source: Optional[str] = None
    node: Any = field(default=None, repr=False, compare=False)


@dataclass
class EntityInfo:
    name: str
    type: EntityType
    signature: str = ""


@dataclass
class ChunkEntityInfo:
    """Entity overlapping a chunk; ``is_partial`` when it extends past the chunk."""

    name: str
    type: EntityType
    signature: str = ""
    docstring: Optional[str] = None
    line_range: Optional[LineRange] = None
    is_partial: bool = False


@dataclass
class SiblingInfo:
    name: str
    type: EntityType
    position: SiblingPosition
    distance: int
    signature: Optional[str] = None


@dataclass
class ImportInfo:
    name: str
    source: str = ""


@dataclass
class ChunkContext:
    filepath: str = ""
    language: Optional[Language] = None
    scope: List[EntityInfo] = field(default_factory=list)
    entities: List[ChunkEntityInfo] = field(default_factory=list)
    siblings: List[SiblingInfo] = field(default_factory=list)
    imports: List[ImportInfo] = field(default_factory=list)
    parse_error: Optional[ParseError] = None


@dataclass
class CodeChunk:
    """A size-bounded piece of a source file plus its structural context."""

    text: str
    contextualized_text: str
    byte_range: ByteRange
    line_range: LineRange
    context: ChunkContext
    index: int
    total_chunks: int


class ChunkOptions(BaseModel):
    """Options accepted by the single-file chunking entry points."""

    model_config = ConfigDict(extra="forbid")

    max_chunk_size: int = Field(default_factory=lambda: settings.max_chunk_size, gt=0)
    context_mode: ContextMode = Field(default_factory=lambda: settings.context_mode)
    sibling_detail: SiblingDetail = Field(default_factory=lambda: settings.sibling_detail)
    filter_imports: bool = Field(default_factory=lambda: settings.filter_imports)
    language: Optional[Language] = None
    overlap_lines: int = Field(default_factory=lambda: settings.overlap_lines, ge=0)

    def merged_with(self, override: Optional["ChunkOptions"]) -> "ChunkOptions":
        """Return a copy where fields explicitly set on ``override`` win."""
        if override is None:
            return self.model_copy()
        updates = {name: getattr(override, name) for name in override.model_fields_set}
        return self.model_copy(update=updates)


class BatchOptions(ChunkOptions):
    """Chunk options plus the knobs of the multi-file orchestrator."""

    concurrency: int = Field(default_factory=lambda: settings.batch_concurrency, gt=0)
    on_progress: Optional[ProgressCallback] = Field(default=None, exclude=True)

    def chunk_options(self) -> ChunkOptions:
        fields = set(ChunkOptions.model_fields)
        explicit = {name: getattr(self, name) for name in fields}
        return ChunkOptions(**explicit)


@dataclass
class FileInput:
    """One file of a batch; ``options`` override the batch options field by field."""

    filepath: str
    code: str | bytes
    options: Optional[ChunkOptions] = None


@dataclass
class BatchResult:
    filepath: str
    chunks: Optional[List[CodeChunk]] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = [
    "BatchOptions",
    "BatchResult",
    "ByteRange",
    "ChunkContext",
    "ChunkEntityInfo",
    "ChunkOptions",
    "CodeChunk",
    "ContextMode",
    "EntityInfo",
    "EntityType",
    "ExtractedEntity",
    "FileInput",
    "ImportInfo",
    "Language",
    "LineRange",
    "ParseError",
    "ProgressCallback",
    "SiblingDetail",
    "SiblingInfo",
    "UNKNOWN_TOTAL",
]
