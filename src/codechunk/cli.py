"""
Command line interface for codechunk.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Optional, Sequence, get_args

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .languages import LANGUAGE_CONFIGS, LANGUAGE_EXTENSIONS
from .logger import configure_logging, get_logger, redirect_logging_to_file
from .models import BatchOptions, BatchResult, CodeChunk, ContextMode, FileInput, SiblingDetail
from .services import chunk_batch
from .settings import settings
from .version import get_version

app = typer.Typer(name="codechunk", help="Syntax-aware source chunking.")
configure_logging(level=settings.log_level, enable_console=False)
log = get_logger(__name__)
console = Console(stderr=True)

DEFAULT_IGNORE_PATTERNS: Sequence[str] = (
    ".*",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".venv",
    "venv",
    "node_modules",
    "target",
    "vendor",
    "build*",
    "dist",
)


def _should_ignore(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch(name, pattern) for pattern in patterns)


def _collect_files(paths: Sequence[Path], patterns: Sequence[str]) -> list[Path]:
    """Explicit files are kept as given; directories contribute supported files only."""
    files: list[Path] = []
    for base in paths:
        if base.is_file():
            files.append(base)
            continue
        for root, dirs, filenames in os.walk(base):
            dirs[:] = sorted(d for d in dirs if not _should_ignore(d, patterns))
            root_path = Path(root)
            for filename in sorted(filenames):
                if _should_ignore(filename, patterns):
                    continue
                candidate = root_path / filename
                if candidate.suffix.lower() in LANGUAGE_EXTENSIONS:
                    files.append(candidate)
    return list(dict.fromkeys(files))


def _chunk_payload(filepath: str, chunk: CodeChunk) -> dict:
    payload = asdict(chunk)
    payload["filepath"] = filepath
    return payload


def _print_results(results: List[BatchResult], as_json: bool) -> None:
    for result in results:
        if not result.ok:
            typer.echo(f"[ERROR] {result.filepath}: {result.error}", err=True)
            continue
        chunks = result.chunks or []
        if as_json:
            for chunk in chunks:
                typer.echo(json.dumps(_chunk_payload(result.filepath, chunk), ensure_ascii=False))
        else:
            typer.echo(f"{result.filepath}: {len(chunks)} chunks")


@app.command()
def chunk(
    paths: List[Path] = typer.Argument(..., help="Files or directories to chunk."),
    max_chunk_size: Optional[int] = typer.Option(
        None, "--max-chunk-size", "-m", min=1, help="Non-whitespace character budget per chunk."
    ),
    context_mode: Optional[str] = typer.Option(
        None, "--context-mode", help="Context to attach: none, minimal or full."
    ),
    sibling_detail: Optional[str] = typer.Option(
        None, "--sibling-detail", help="Sibling detail: none, names or signatures."
    ),
    filter_imports: bool = typer.Option(
        False,
        "--filter-imports",
        help="Only list imports referenced by the chunk's entities.",
    ),
    overlap_lines: Optional[int] = typer.Option(
        None, "--overlap-lines", min=0, help="Lines of the previous chunk repeated as overlap."
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-j", min=1, help="Number of files processed in parallel."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print one JSON object per chunk."),
    log_file: Optional[Path] = typer.Option(
        None, "--log", help="Write detailed logs to this file."
    ),
) -> None:
    """Chunk source files and report the result per file."""
    if context_mode is not None and context_mode not in get_args(ContextMode):
        raise typer.BadParameter(f"invalid context mode: {context_mode}", param_hint="--context-mode")
    if sibling_detail is not None and sibling_detail not in get_args(SiblingDetail):
        raise typer.BadParameter(
            f"invalid sibling detail: {sibling_detail}", param_hint="--sibling-detail"
        )

    missing = [path for path in paths if not path.exists()]
    if missing:
        typer.echo(f"[ERROR] Path not found: {missing[0]}", err=True)
        raise typer.Exit(code=2)

    if log_file:
        redirect_logging_to_file(log_file.resolve(), level=settings.log_level)
        typer.echo(f"Logging detailed output to {log_file.resolve()}", err=True)

    files = _collect_files(paths, DEFAULT_IGNORE_PATTERNS)
    if not files:
        typer.echo("No supported source files found.", err=True)
        raise typer.Exit()

    requested = {
        "max_chunk_size": max_chunk_size,
        "context_mode": context_mode,
        "sibling_detail": sibling_detail,
        "filter_imports": filter_imports or None,
        "overlap_lines": overlap_lines,
        "concurrency": concurrency,
    }
    inputs = [FileInput(filepath=str(path), code=path.read_bytes()) for path in files]

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Chunking files", total=len(inputs))

        def on_progress(completed: int, total: int, filepath: str, success: bool) -> None:
            progress.update(
                task,
                completed=completed,
                description=f"Chunking {Path(filepath).name} ({completed}/{total})",
            )

        options = BatchOptions(
            **{name: value for name, value in requested.items() if value is not None},
            on_progress=on_progress,
        )
        results = chunk_batch(inputs, options)

    _print_results(results, as_json)
    failed = sum(1 for result in results if not result.ok)
    log.info("cli_chunk_finished", files=len(results), failed=failed)
    if failed:
        raise typer.Exit(code=1)


@app.command()
def languages() -> None:
    """List supported languages and their file extensions."""
    for language, config in LANGUAGE_CONFIGS.items():
        typer.echo(f"{language.value}: {', '.join(config.extensions)}")


@app.command()
def version() -> None:
    """Print the installed codechunk version."""
    typer.echo(get_version())


if __name__ == "__main__":  # pragma: no cover
    app()
