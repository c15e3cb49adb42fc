"""Data models for the tree walker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FileEntry:
    """A regular file found under the walk root."""

    relative_path: str  # forward-slash, root-relative
    size_bytes: int = 0
    modified_time: datetime | None = None

    def __post_init__(self) -> None:
        if not self.relative_path or self.relative_path.startswith("/"):
            raise ValueError(f"relative_path must be root-relative, got {self.relative_path!r}")
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be >= 0, got {self.size_bytes}")
