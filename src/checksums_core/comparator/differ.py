"""Compare two manifests path by path."""

from __future__ import annotations

import logging

from checksums_core.comparator.models import DiffEntry, DiffReport, DiffStatus
from checksums_core.errors import IncomparableAlgorithmSet
from checksums_core.manifest.models import DigestRecord, Manifest

logger = logging.getLogger(__name__)


def _algorithm_names(record: DigestRecord) -> tuple[str, ...]:
    return tuple(sorted(a.value for a in record.algorithms))


class ManifestComparator:
    """Classifies every path of two manifests as unchanged/modified/added/removed."""

    @staticmethod
    def compare_records(path: str, old: DigestRecord, new: DigestRecord) -> DiffEntry:
        """Judge one shared path using only the algorithms both records carry.

        No common algorithm (which includes either side being an errored
        record) means the contents cannot be verified, so the entry is
        reported as incomparable rather than unchanged.
        """
        shared = old.algorithms & new.algorithms
        if not shared:
            reason = IncomparableAlgorithmSet(path, _algorithm_names(old), _algorithm_names(new))
            logger.warning("Cannot compare %s", reason)
            return DiffEntry(path, DiffStatus.incomparable, old, new, reason)
        if all(old.digests[alg] == new.digests[alg] for alg in shared):
            return DiffEntry(path, DiffStatus.unchanged, old, new)
        return DiffEntry(path, DiffStatus.modified, old, new)

    @staticmethod
    def compare(old: Manifest, new: Manifest) -> list[DiffEntry]:
        """Compare *old* against *new*; entries come back sorted by path."""
        old_paths = set(old.entries)
        new_paths = set(new.entries)

        result: list[DiffEntry] = []
        for path in sorted(old_paths | new_paths):
            if path not in old_paths:
                result.append(DiffEntry(path, DiffStatus.added, new_digest=new.entries[path]))
            elif path not in new_paths:
                result.append(DiffEntry(path, DiffStatus.removed, old_digest=old.entries[path]))
            else:
                result.append(
                    ManifestComparator.compare_records(path, old.entries[path], new.entries[path])
                )
        return result

    @staticmethod
    def report(old: Manifest, new: Manifest) -> DiffReport:
        """``compare`` wrapped in a DiffReport."""
        return DiffReport(entries=tuple(ManifestComparator.compare(old, new)))
