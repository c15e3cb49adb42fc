"""End-to-end create and verify runs: walk, hash, then save or compare."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from checksums_core.comparator import DiffReport, diff_report
from checksums_core.config.models import RunConfig
from checksums_core.dispatcher import HashDispatcher, HashRun, ProgressCallback
from checksums_core.errors import EntryError
from checksums_core.manifest.models import Manifest
from checksums_core.walker import FileEntry, TreeWalker

logger = logging.getLogger(__name__)


@dataclass
class VerifyResult:
    """Outcome of replaying a saved manifest against the tree on disk."""

    report: DiffReport
    baseline: Manifest
    manifest: Manifest
    errors: list[EntryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.report.has_changes and not self.errors


def _own_files(root: Path, config: RunConfig) -> set[str]:
    """Relative paths of manifest files that live inside the tree being hashed."""
    own: set[str] = set()
    for candidate in (config.output_manifest_path, config.compare_against_path):
        if candidate is None:
            continue
        resolved = Path(candidate).resolve()
        if resolved.is_relative_to(root):
            own.add(resolved.relative_to(root).as_posix())
    return own


def _hash_tree(
    config: RunConfig,
    dispatcher: HashDispatcher,
) -> HashRun:
    walker = TreeWalker(config.root_path, config.walker)
    skip = _own_files(walker.root, config)
    entries: list[FileEntry] = [e for e in walker.walk() if e.relative_path not in skip]
    run = dispatcher.run(walker.root, entries)
    run.errors = sorted(walker.errors + run.errors, key=lambda e: e.path)
    return run


def create_manifest(
    config: RunConfig,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> HashRun:
    """Hash the tree at ``config.root_path``.

    The manifest is written to ``config.output_manifest_path`` when set.
    Per-file problems come back in ``HashRun.errors``; configuration and
    structural problems are raised.
    """
    dispatcher = HashDispatcher.from_config(config.hashing, progress, cancel_event)
    run = _hash_tree(config, dispatcher)
    if config.output_manifest_path is not None:
        out = Path(config.output_manifest_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        run.manifest.save(out)
        logger.info("Wrote %d entries to %s", len(run.manifest), out)
    return run


def verify_tree(
    config: RunConfig,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> VerifyResult:
    """Re-hash the tree and compare it against ``config.compare_against_path``.

    Unless the configuration names algorithms explicitly, the tree is hashed
    with the baseline manifest's own algorithm set.
    """
    if config.compare_against_path is None:
        raise ValueError("verify needs compare_against_path")
    baseline = Manifest.load(Path(config.compare_against_path))

    hashing = config.hashing
    if "algorithms" not in hashing.model_fields_set and baseline.algorithms:
        hashing = hashing.model_copy(update={"algorithms": baseline.algorithms})
    dispatcher = HashDispatcher.from_config(hashing, progress, cancel_event)

    run = _hash_tree(config, dispatcher)
    report = diff_report(baseline, run.manifest)
    counts = report.counts()
    logger.info(
        "Verified %s: %s",
        config.root_path,
        ", ".join(f"{n} {status.value}" for status, n in counts.items()),
    )
    return VerifyResult(report=report, baseline=baseline, manifest=run.manifest, errors=run.errors)
