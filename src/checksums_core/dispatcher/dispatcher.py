"""Parallel hashing of a file list into a Manifest."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from checksums_core.algorithms import DigestAlgorithm, parse_algorithms
from checksums_core.config.models import DEFAULT_CHUNK_SIZE, HashConfig
from checksums_core.errors import Aborted, DuplicatePathError, EntryError, FileIOError
from checksums_core.manifest.models import DigestRecord, Manifest
from checksums_core.walker.models import FileEntry

logger = logging.getLogger(__name__)

# (relative path, bytes processed, total files)
ProgressCallback = Callable[[str, int, int], None]

# How often the orchestrator wakes up to look at the cancel event
_POLL_INTERVAL = 0.1


class _Cancelled(Exception):
    """Raised inside a worker when the run is aborted between chunks."""


@dataclass
class HashRun:
    """A completed manifest plus the per-file failures met while building it."""

    manifest: Manifest
    errors: list[EntryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class _Outcome:
    path: str
    record: DigestRecord
    bytes_processed: int
    error: FileIOError | None = None


def hash_file(
    path: Path,
    algorithms: Iterable[DigestAlgorithm],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    should_stop: Callable[[], bool] | None = None,
) -> tuple[DigestRecord, int]:
    """Read *path* once and feed every chunk to every algorithm.

    Returns the record and the number of bytes read. ``should_stop`` is
    checked before each read so an abort takes effect within one chunk.
    """
    accumulators = {alg: alg.new() for alg in algorithms}
    total = 0
    with open(path, "rb") as f:
        while True:
            if should_stop is not None and should_stop():
                raise _Cancelled(str(path))
            chunk = f.read(chunk_size)
            if not chunk:
                break
            total += len(chunk)
            for acc in accumulators.values():
                acc.update(chunk)
    record = DigestRecord(digests={alg: acc.finalize() for alg, acc in accumulators.items()})
    return record, total


class HashDispatcher:
    """Hashes FileEntry values on a bounded thread pool.

    Each task hashes exactly one file and hands back an immutable outcome;
    only the orchestrating thread writes the result map, so every manifest
    entry is written exactly once. A file that cannot be read becomes an
    errored record plus an EntryError; it never stops the run. Cancelling
    (via ``cancel_event`` or Ctrl-C) discards all results and raises
    ``Aborted``.
    """

    def __init__(
        self,
        algorithms: Iterable[DigestAlgorithm | str],
        concurrency: int | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.algorithms = parse_algorithms(algorithms)
        if concurrency is None:
            concurrency = os.cpu_count() or 1
        if concurrency <= 0:
            raise ValueError(f"concurrency must be positive, got {concurrency}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.concurrency = concurrency
        self.chunk_size = chunk_size
        self.progress = progress
        self.cancel_event = cancel_event

    @classmethod
    def from_config(
        cls,
        config: HashConfig,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> HashDispatcher:
        return cls(
            algorithms=config.algorithms,
            concurrency=config.concurrency,
            chunk_size=config.chunk_size,
            progress=progress,
            cancel_event=cancel_event,
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, root: Path | str, entries: Iterable[FileEntry]) -> HashRun:
        """Hash every entry under *root* and return the finished manifest."""
        root = Path(root)
        entries = list(entries)
        seen: set[str] = set()
        for entry in entries:
            if entry.relative_path in seen:
                raise DuplicatePathError(entry.relative_path)
            seen.add(entry.relative_path)

        total = len(entries)
        stop = threading.Event()

        def should_stop() -> bool:
            return stop.is_set() or (self.cancel_event is not None and self.cancel_event.is_set())

        if should_stop():
            raise Aborted(0, total)

        logger.info(
            "Hashing %d files under %s with %s (%d workers)",
            total,
            root,
            ",".join(a.value for a in self.algorithms),
            self.concurrency,
        )

        results: dict[str, DigestRecord] = {}
        errors: list[EntryError] = []
        executor = ThreadPoolExecutor(
            max_workers=self.concurrency, thread_name_prefix="checksums-hash"
        )
        try:
            pending: set[Future[_Outcome]] = {
                executor.submit(self._hash_entry, root, entry, should_stop) for entry in entries
            }
            while pending:
                done, pending = wait(pending, timeout=_POLL_INTERVAL, return_when=FIRST_COMPLETED)
                if should_stop():
                    raise Aborted(len(results), total)
                for future in done:
                    outcome = future.result()
                    results[outcome.path] = outcome.record
                    if outcome.error is not None:
                        errors.append(EntryError(path=outcome.path, error=outcome.error))
                    self._report(outcome.path, outcome.bytes_processed, total)
                    if should_stop():
                        raise Aborted(len(results), total)
        except _Cancelled:
            raise Aborted(len(results), total) from None
        except KeyboardInterrupt:
            raise Aborted(len(results), total) from None
        finally:
            # Stragglers exit after their current chunk; queued work never starts
            stop.set()
            executor.shutdown(wait=True, cancel_futures=True)

        errors.sort(key=lambda e: e.path)
        manifest = Manifest.build(
            results.items(),
            algorithms=self.algorithms,
            root_path=str(root),
            created_at=datetime.now(timezone.utc),
        )
        logger.info("Hashed %d files (%d errors)", total, len(errors))
        return HashRun(manifest=manifest, errors=errors)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _hash_entry(
        self, root: Path, entry: FileEntry, should_stop: Callable[[], bool]
    ) -> _Outcome:
        path = entry.relative_path
        if should_stop():
            raise _Cancelled(path)
        try:
            record, nbytes = hash_file(root / path, self.algorithms, self.chunk_size, should_stop)
        except OSError as e:
            error = FileIOError(path, e)
            logger.warning("Could not hash %s", error)
            return _Outcome(path, DigestRecord.failed(type(error).__name__), 0, error)
        logger.debug("Hashed %s (%d bytes)", path, nbytes)
        return _Outcome(path, record, nbytes)

    def _report(self, path: str, nbytes: int, total: int) -> None:
        if self.progress is None:
            return
        try:
            self.progress(path, nbytes, total)
        except Exception:
            logger.exception("Progress callback failed for %s", path)
