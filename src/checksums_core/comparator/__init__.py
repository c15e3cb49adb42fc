"""Comparator: turns two manifests into an ordered diff."""

from checksums_core.comparator.differ import ManifestComparator
from checksums_core.comparator.models import DiffEntry, DiffReport, DiffStatus
from checksums_core.manifest.models import Manifest


def compare(old: Manifest, new: Manifest) -> list[DiffEntry]:
    """Convenience wrapper around ManifestComparator.compare()."""
    return ManifestComparator.compare(old, new)


def diff_report(old: Manifest, new: Manifest) -> DiffReport:
    """Convenience wrapper around ManifestComparator.report()."""
    return ManifestComparator.report(old, new)


__all__ = [
    "DiffEntry",
    "DiffReport",
    "DiffStatus",
    "ManifestComparator",
    "compare",
    "diff_report",
]
