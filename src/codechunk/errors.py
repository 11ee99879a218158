"""Error types raised by the chunking pipeline."""
from __future__ import annotations

from typing import Optional


class CodeChunkError(Exception):
    """Base class for every error raised by codechunk."""


class UnsupportedLanguageError(CodeChunkError, ValueError):
    """No grammar is available for the requested or detected language."""

    def __init__(self, language: Optional[str] = None, filepath: Optional[str] = None) -> None:
        self.language = language
        self.filepath = filepath
        if language:
            message = f"Unsupported language for chunking: {language}"
        elif filepath:
            message = f"Unable to detect a supported language for: {filepath}"
        else:
            message = "Unsupported language for chunking"
        super().__init__(message)


class ParseFailedError(CodeChunkError, RuntimeError):
    """The syntax-tree provider itself failed (as opposed to recoverable syntax errors)."""

    def __init__(self, language: str, reason: str) -> None:
        self.language = language
        self.reason = reason
        super().__init__(f"Parse failed for {language}: {reason}")


class BatchCancelledError(CodeChunkError):
    """The batch was cancelled before this file was processed."""

    def __init__(self, filepath: str) -> None:
        self.filepath = filepath
        super().__init__(f"Batch cancelled before processing: {filepath}")


__all__ = [
    "BatchCancelledError",
    "CodeChunkError",
    "ParseFailedError",
    "UnsupportedLanguageError",
]
