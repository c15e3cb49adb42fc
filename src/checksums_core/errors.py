"""Error taxonomy for the hashing and verification engine."""

from __future__ import annotations

from dataclasses import dataclass


class ChecksumsError(Exception):
    """Base class for every error raised by checksums_core."""


class UnsupportedAlgorithm(ChecksumsError, ValueError):
    """An algorithm name that is not in the registry."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        self.name = name
        super().__init__(reason or f"unsupported algorithm: {name!r}")


class CyclicTraversal(ChecksumsError):
    """A followed symlink led back to a directory that was already visited."""

    def __init__(self, path: str, real_path: str) -> None:
        self.path = path
        self.real_path = real_path
        super().__init__(f"{path}: already visited as {real_path}")


class FileAccessError(ChecksumsError):
    """The walker could not stat or list an entry."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        super().__init__(f"{path}: {cause.strerror or cause}")
        self.__cause__ = cause


class FileIOError(ChecksumsError):
    """A worker could not open or fully read a file."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        super().__init__(f"{path}: {cause.strerror or cause}")
        self.__cause__ = cause


class DuplicatePathError(ChecksumsError):
    """The same relative path showed up twice in one run."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"duplicate path in manifest: {path!r}")


class MalformedManifest(ChecksumsError):
    """A manifest line does not match the record schema."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}: {line!r}")


class IncomparableAlgorithmSet(ChecksumsError):
    """Two records for the same path share no algorithm."""

    def __init__(self, path: str, old: tuple[str, ...], new: tuple[str, ...]) -> None:
        self.path = path
        self.old = old
        self.new = new
        super().__init__(
            f"{path}: no common algorithm "
            f"(old: {','.join(old) or 'none'}; new: {','.join(new) or 'none'})"
        )


class Aborted(ChecksumsError):
    """The hashing run was cancelled; no partial manifest is returned."""

    def __init__(self, completed: int = 0, total: int = 0) -> None:
        self.completed = completed
        self.total = total
        super().__init__(f"run aborted after {completed} of {total} files")


@dataclass(frozen=True)
class EntryError:
    """A per-file failure reported alongside a manifest rather than raised."""

    path: str
    error: ChecksumsError

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    def __str__(self) -> str:
        return f"{self.kind}: {self.error}"
