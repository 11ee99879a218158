import threading

import pytest

pytest.importorskip("tree_sitter_language_pack")

from codechunk import (  # noqa: E402
    BatchCancelledError,
    BatchOptions,
    ChunkOptions,
    FileInput,
    UnsupportedLanguageError,
    chunk_batch,
    chunk_batch_stream,
)

PY = "def add(a, b):\n    return a + b\n"
TS = "export function add(a: number, b: number): number {\n  return a + b;\n}\n"


def _files(count: int = 6) -> list[FileInput]:
    files = []
    for index in range(count):
        if index % 2:
            files.append(FileInput(filepath=f"src/mod_{index}.ts", code=TS))
        else:
            files.append(FileInput(filepath=f"src/mod_{index}.py", code=PY.encode("utf-8")))
    return files


def test_batch_isolates_unsupported_files() -> None:
    files = [
        FileInput(filepath="a.py", code=PY),
        FileInput(filepath="notes.txt", code="just text"),
        FileInput(filepath="b.ts", code=TS),
    ]
    results = chunk_batch(files)

    assert len(results) == 3
    assert [result.filepath for result in results] == ["a.py", "notes.txt", "b.ts"]
    assert results[0].ok and results[0].chunks
    assert isinstance(results[1].error, UnsupportedLanguageError)
    assert results[1].chunks is None
    assert results[2].ok and results[2].chunks


def test_batch_preserves_input_order_and_reports_progress() -> None:
    files = _files(8)
    seen = []

    def on_progress(completed: int, total: int, filepath: str, success: bool) -> None:
        seen.append((completed, total, filepath, success))

    results = chunk_batch(files, BatchOptions(concurrency=3, on_progress=on_progress))

    assert [result.filepath for result in results] == [file.filepath for file in files]
    assert all(result.ok for result in results)
    assert sorted(entry[0] for entry in seen) == list(range(1, 9))
    assert {entry[1] for entry in seen} == {8}
    assert sorted(entry[2] for entry in seen) == sorted(file.filepath for file in files)


def test_per_file_options_override_batch_options() -> None:
    files = [
        FileInput(filepath="a.py", code=PY),
        FileInput(filepath="b.py", code=PY, options=ChunkOptions(context_mode="none")),
        FileInput(filepath="script", code=PY, options=ChunkOptions(language="python")),
    ]
    results = chunk_batch(files, BatchOptions(overlap_lines=0))

    assert results[0].chunks[0].context.filepath == "a.py"
    assert results[1].chunks[0].context.filepath == ""
    assert results[2].ok


def test_empty_batch() -> None:
    assert chunk_batch([]) == []
    assert list(chunk_batch_stream([])) == []


def test_cancelled_batch_marks_unprocessed_files() -> None:
    cancel = threading.Event()
    cancel.set()
    results = chunk_batch(_files(4), cancel_event=cancel)

    assert len(results) == 4
    assert all(isinstance(result.error, BatchCancelledError) for result in results)


def test_cancel_from_progress_callback_stops_new_work() -> None:
    cancel = threading.Event()

    def on_progress(completed: int, total: int, filepath: str, success: bool) -> None:
        cancel.set()

    results = chunk_batch(
        _files(6), BatchOptions(concurrency=1, on_progress=on_progress), cancel_event=cancel
    )
    assert len(results) == 6
    assert results[0].ok
    assert all(isinstance(result.error, BatchCancelledError) for result in results[1:])


def test_stream_yields_every_file() -> None:
    files = _files(6) + [FileInput(filepath="README.md", code="# hi")]
    results = list(chunk_batch_stream(files, BatchOptions(concurrency=4)))

    assert sorted(result.filepath for result in results) == sorted(file.filepath for file in files)
    failed = [result for result in results if not result.ok]
    assert [result.filepath for result in failed] == ["README.md"]


def test_stream_can_be_closed_early() -> None:
    stream = chunk_batch_stream(_files(20), BatchOptions(concurrency=2))
    first = next(stream)
    assert first.ok
    stream.close()


def test_stream_respects_cancel_event() -> None:
    cancel = threading.Event()
    cancel.set()
    assert list(chunk_batch_stream(_files(4), cancel_event=cancel)) == []
