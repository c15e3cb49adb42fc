"""Directory traversal producing a sorted sequence of FileEntry values."""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path

from checksums_core.config.models import WalkerConfig
from checksums_core.errors import CyclicTraversal, EntryError, FileAccessError
from checksums_core.walker.models import FileEntry

logger = logging.getLogger(__name__)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


class TreeWalker:
    """Enumerates regular files under *root* according to a WalkerConfig.

    The walk runs single-threaded and collects every entry before yielding,
    so the sequence handed downstream is always sorted by relative path.
    Unreadable entries and symlink cycles are skipped and recorded in
    ``errors`` instead of aborting the walk.
    """

    def __init__(self, root: Path | str, config: WalkerConfig | None = None) -> None:
        root = Path(root)
        if not root.exists():
            raise FileNotFoundError(f"Directory not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")
        self.root = root.resolve()
        self.config = config or WalkerConfig()
        self._include = re.compile(self.config.include_pattern) if self.config.include_pattern else None
        self._exclude = re.compile(self.config.exclude_pattern) if self.config.exclude_pattern else None
        self.errors: list[EntryError] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def walk(self) -> Iterator[FileEntry]:
        """Lazily yield entries; the tree is read on the first ``next()``."""
        yield from self.collect()

    def collect(self) -> list[FileEntry]:
        """Walk the whole tree and return its files sorted by relative path."""
        self.errors = []
        found: list[FileEntry] = []
        root_stat = self.root.stat()
        visited = {(root_stat.st_dev, root_stat.st_ino)}

        # (absolute dir, relative prefix, depth of files inside it)
        stack: list[tuple[Path, str, int]] = [(self.root, "", 0)]
        while stack:
            directory, prefix, depth = stack.pop()
            subdirs = self._scan_dir(directory, prefix, depth, visited, found)
            # Reverse so the pop order follows sorted names
            stack.extend(reversed(subdirs))

        found.sort(key=lambda e: e.relative_path)
        logger.debug("Walked %s: %d files, %d skipped", self.root, len(found), len(self.errors))
        return found

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _can_descend(self, depth: int) -> bool:
        max_depth = self.config.max_depth
        return max_depth is None or depth < max_depth

    def _ignored(self, name: str) -> bool:
        if not self.config.include_hidden and _is_hidden(name):
            return True
        return any(fnmatch.fnmatchcase(name, pat) for pat in self.config.ignore_patterns)

    def _wanted(self, rel: str) -> bool:
        if self._include is not None and not self._include.search(rel):
            return False
        if self._exclude is not None and self._exclude.search(rel):
            return False
        return True

    def _skip(self, rel: str, error: FileAccessError | CyclicTraversal) -> None:
        logger.warning("Skipping %s", error)
        self.errors.append(EntryError(path=rel, error=error))

    def _scan_dir(
        self,
        directory: Path,
        prefix: str,
        depth: int,
        visited: set[tuple[int, int]],
        found: list[FileEntry],
    ) -> list[tuple[Path, str, int]]:
        follow = self.config.follow_symlinks
        subdirs: list[tuple[Path, str, int]] = []
        try:
            with os.scandir(directory) as it:
                dir_entries = sorted(it, key=lambda d: d.name)
        except OSError as e:
            self._skip(prefix.rstrip("/") or ".", FileAccessError(prefix.rstrip("/") or ".", e))
            return subdirs

        for dent in dir_entries:
            if self._ignored(dent.name):
                continue
            rel = prefix + dent.name
            try:
                if dent.is_symlink() and not follow:
                    logger.debug("Not following symlink %s", rel)
                    continue
                if dent.is_dir(follow_symlinks=follow):
                    if not self._can_descend(depth):
                        continue
                    st = dent.stat(follow_symlinks=follow)
                    key = (st.st_dev, st.st_ino)
                    if key in visited:
                        self._skip(rel, CyclicTraversal(rel, os.path.realpath(dent.path)))
                        continue
                    visited.add(key)
                    subdirs.append((Path(dent.path), rel + "/", depth + 1))
                elif dent.is_file(follow_symlinks=follow):
                    if not self._wanted(rel):
                        continue
                    st = dent.stat(follow_symlinks=follow)
                    found.append(
                        FileEntry(
                            relative_path=rel,
                            size_bytes=st.st_size,
                            modified_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                        )
                    )
                # sockets, fifos, devices and dangling links are not hashed
            except OSError as e:
                self._skip(rel, FileAccessError(rel, e))

        return subdirs
