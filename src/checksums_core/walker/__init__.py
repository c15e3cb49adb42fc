"""Tree walker: enumerates the regular files a manifest should cover."""

from checksums_core.walker.models import FileEntry
from checksums_core.walker.walker import TreeWalker

__all__ = ["FileEntry", "TreeWalker"]
