"""Data models for manifest comparison."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from checksums_core.errors import IncomparableAlgorithmSet
from checksums_core.manifest.models import DigestRecord


class DiffStatus(str, Enum):
    """Classification of one path across two manifests."""

    unchanged = "unchanged"
    modified = "modified"
    added = "added"
    removed = "removed"
    incomparable = "incomparable"


@dataclass(frozen=True)
class DiffEntry:
    """One path's verdict, with the records it was judged from."""

    relative_path: str
    status: DiffStatus
    old_digest: DigestRecord | None = None
    new_digest: DigestRecord | None = None
    reason: IncomparableAlgorithmSet | None = None


@dataclass(frozen=True)
class DiffReport:
    """Ordered comparison result, with per-status views."""

    entries: tuple[DiffEntry, ...] = ()

    def _paths(self, status: DiffStatus) -> tuple[str, ...]:
        return tuple(e.relative_path for e in self.entries if e.status is status)

    @property
    def unchanged(self) -> tuple[str, ...]:
        return self._paths(DiffStatus.unchanged)

    @property
    def modified(self) -> tuple[str, ...]:
        return self._paths(DiffStatus.modified)

    @property
    def added(self) -> tuple[str, ...]:
        return self._paths(DiffStatus.added)

    @property
    def removed(self) -> tuple[str, ...]:
        return self._paths(DiffStatus.removed)

    @property
    def incomparable(self) -> tuple[str, ...]:
        return self._paths(DiffStatus.incomparable)

    @property
    def has_changes(self) -> bool:
        """True when anything is not provably unchanged."""
        return any(e.status is not DiffStatus.unchanged for e in self.entries)

    def counts(self) -> dict[DiffStatus, int]:
        counter = Counter(e.status for e in self.entries)
        return {status: counter.get(status, 0) for status in DiffStatus}

    def __len__(self) -> int:
        return len(self.entries)
