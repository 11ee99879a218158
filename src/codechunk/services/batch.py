"""
Concurrent multi-file chunking.

A bounded pool of worker threads pulls file indices from a shared queue and
runs the single-file pipeline for each. Files share no mutable state; only
the completed counter and the progress callback sit behind a lock.
"""
from __future__ import annotations

import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, List, Optional, Sequence

from ..chunking import chunk_bytes
from ..errors import BatchCancelledError
from ..logger import get_logger
from ..models import BatchOptions, BatchResult, ChunkOptions, FileInput

log = get_logger(__name__)

_WORKER_DONE = object()


class _BatchRun:
    """State shared by the workers of one batch call."""

    def __init__(
        self,
        files: Sequence[FileInput],
        options: Optional[BatchOptions],
        cancel_event: Optional[threading.Event],
    ) -> None:
        self.files = list(files)
        self.options = options or BatchOptions()
        self.base_options: ChunkOptions = self.options.chunk_options()
        self.cancel_event = cancel_event
        self.stop_event = threading.Event()
        self.jobs: "queue.SimpleQueue[int]" = queue.SimpleQueue()
        for index in range(len(self.files)):
            self.jobs.put(index)
        self._lock = threading.Lock()
        self._completed = 0
        self._failed = 0

    @property
    def total(self) -> int:
        return len(self.files)

    @property
    def worker_count(self) -> int:
        return max(1, min(self.options.concurrency, self.total))

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    def cancelled(self) -> bool:
        if self.stop_event.is_set():
            return True
        return self.cancel_event is not None and self.cancel_event.is_set()

    def process(self, index: int) -> BatchResult:
        file = self.files[index]
        data = file.code.encode("utf-8") if isinstance(file.code, str) else file.code
        try:
            chunks = chunk_bytes(file.filepath, data, self.base_options.merged_with(file.options))
            result = BatchResult(filepath=file.filepath, chunks=chunks)
        except Exception as exc:
            log.warning(
                "batch_file_failed",
                file=file.filepath,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            result = BatchResult(filepath=file.filepath, error=exc)
        self._report(result)
        return result

    def _report(self, result: BatchResult) -> None:
        with self._lock:
            self._completed += 1
            if not result.ok:
                self._failed += 1
            if self.options.on_progress is not None:
                self.options.on_progress(self._completed, self.total, result.filepath, result.ok)

    def work(self, publish: Callable[[int, BatchResult], None]) -> None:
        """Worker loop: take jobs until the queue is empty or the run is cancelled."""
        while not self.cancelled():
            try:
                index = self.jobs.get_nowait()
            except queue.Empty:
                return
            publish(index, self.process(index))

    def log_finished(self) -> None:
        if self.cancelled():
            log.info("batch_cancelled", completed=self.completed, total=self.total)
        else:
            log.info("batch_completed", files=self.total, failed=self.failed)


def chunk_batch(
    files: Sequence[FileInput],
    options: Optional[BatchOptions] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[BatchResult]:
    """
    Chunk ``files`` concurrently and return one result per file, in input order.

    Per-file failures are recorded on that file's :class:`BatchResult`. Files
    never started because ``cancel_event`` was set carry a
    :class:`BatchCancelledError`.
    """
    run = _BatchRun(files, options, cancel_event)
    if not run.files:
        return []

    slots: List[Optional[BatchResult]] = [None] * run.total

    def publish(index: int, result: BatchResult) -> None:
        slots[index] = result

    log.info("batch_started", files=run.total, concurrency=run.worker_count)
    with ThreadPoolExecutor(max_workers=run.worker_count, thread_name_prefix="codechunk") as executor:
        futures = [executor.submit(run.work, publish) for _ in range(run.worker_count)]
        for future in futures:
            future.result()
    run.log_finished()

    return [
        slot
        if slot is not None
        else BatchResult(filepath=file.filepath, error=BatchCancelledError(file.filepath))
        for slot, file in zip(slots, run.files)
    ]


def chunk_batch_stream(
    files: Sequence[FileInput],
    options: Optional[BatchOptions] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[BatchResult]:
    """
    Chunk ``files`` concurrently, yielding results in completion order.

    Work starts when iteration starts. Setting ``cancel_event`` or closing the
    iterator stops the workers from taking further files; results finished
    after cancellation are dropped.
    """
    run = _BatchRun(files, options, cancel_event)
    if not run.files:
        return

    results: "queue.SimpleQueue[object]" = queue.SimpleQueue()

    def publish(_index: int, result: BatchResult) -> None:
        # Nobody is listening any more once the run is cancelled.
        if not run.cancelled():
            results.put(result)

    def work() -> None:
        try:
            run.work(publish)
        finally:
            results.put(_WORKER_DONE)

    log.info("batch_started", files=run.total, concurrency=run.worker_count)
    executor = ThreadPoolExecutor(max_workers=run.worker_count, thread_name_prefix="codechunk-stream")
    futures = [executor.submit(work) for _ in range(run.worker_count)]
    finished = 0
    try:
        while finished < run.worker_count:
            item = results.get()
            if item is _WORKER_DONE:
                finished += 1
                continue
            yield item
    finally:
        if finished < run.worker_count:
            run.stop_event.set()
        executor.shutdown(wait=True)
        for future in futures:
            future.result()
        run.log_finished()
