"""Data models for manifests: per-file digest records and the full digest set."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType

from checksums_core.algorithms import DigestAlgorithm
from checksums_core.errors import DuplicatePathError, MalformedManifest

_ERROR_KIND_RE = re.compile(r"[A-Za-z]\w*")


@dataclass(frozen=True)
class DigestRecord:
    """Digests of one file, all computed from the same read of its bytes.

    A record either carries at least one digest or, when the file could not
    be read, an ``error`` marker naming the failure kind and no digests.
    """

    digests: Mapping[DigestAlgorithm, bytes] = field(default_factory=dict)
    error: str | None = None

    def __post_init__(self) -> None:
        digests = {DigestAlgorithm.parse(alg): bytes(d) for alg, d in self.digests.items()}
        if self.error is not None:
            if digests:
                raise ValueError("an errored record cannot carry digests")
            if not _ERROR_KIND_RE.fullmatch(self.error):
                raise ValueError(f"error marker must be a single word, got {self.error!r}")
        elif not digests:
            raise ValueError("a record needs at least one digest or an error marker")
        for alg, d in digests.items():
            if len(d) != alg.digest_size:
                raise ValueError(
                    f"{alg.value} digest must be {alg.digest_size} bytes, got {len(d)}"
                )
        object.__setattr__(self, "digests", MappingProxyType(digests))

    @classmethod
    def failed(cls, kind: str) -> DigestRecord:
        return cls(error=kind)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def algorithms(self) -> frozenset[DigestAlgorithm]:
        return frozenset(self.digests)

    def hexdigest(self, alg: DigestAlgorithm | str) -> str:
        """Lowercase hex of one digest; KeyError if the record lacks it."""
        return self.digests[DigestAlgorithm.parse(alg)].hex()


@dataclass(frozen=True)
class Manifest:
    """Relative path -> DigestRecord for one snapshot of a directory tree.

    Entries are kept sorted by path. ``root_path`` and ``created_at`` are
    informational and do not take part in equality, so two manifests of
    the same tree compare equal regardless of where or when they were made.
    """

    entries: Mapping[str, DigestRecord]
    algorithms: tuple[DigestAlgorithm, ...]
    root_path: str = field(default="", compare=False)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    def __post_init__(self) -> None:
        algorithms = tuple(dict.fromkeys(DigestAlgorithm.parse(a) for a in self.algorithms))
        allowed = set(algorithms)
        for path, record in self.entries.items():
            extra = record.algorithms - allowed
            if extra:
                names = ",".join(sorted(a.value for a in extra))
                raise ValueError(f"{path}: digests for undeclared algorithms: {names}")
        ordered = {p: self.entries[p] for p in sorted(self.entries)}
        object.__setattr__(self, "algorithms", algorithms)
        object.__setattr__(self, "entries", MappingProxyType(ordered))

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        records: Iterable[tuple[str, DigestRecord]],
        algorithms: Iterable[DigestAlgorithm | str],
        root_path: str = "",
        created_at: datetime | None = None,
    ) -> Manifest:
        """Assemble a manifest, refusing any path that appears twice."""
        entries: dict[str, DigestRecord] = {}
        for path, record in records:
            if path in entries:
                raise DuplicatePathError(path)
            entries[path] = record
        return cls(
            entries=entries,
            algorithms=tuple(algorithms),
            root_path=root_path,
            created_at=created_at or datetime.now(timezone.utc),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, path: object) -> bool:
        return path in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def get(self, path: str) -> DigestRecord | None:
        return self.entries.get(path)

    @property
    def errors(self) -> list[str]:
        """Paths whose record is an error marker, sorted."""
        return [p for p, r in self.entries.items() if r.is_error]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(self) -> str:
        """Render the canonical text form."""
        from checksums_core.manifest.codec import serialize

        return serialize(self)

    @classmethod
    def parse(cls, text: str) -> Manifest:
        """Inverse of ``serialize``; raises MalformedManifest on bad lines."""
        from checksums_core.manifest.codec import parse

        return parse(text)

    def save(self, path: Path) -> None:
        """Write the manifest to a UTF-8 text file."""
        path.write_bytes(self.serialize().encode("utf-8"))

    @classmethod
    def load(cls, path: Path) -> Manifest:
        """Read a manifest from a UTF-8 text file.

        Bytes that are not valid UTF-8 raise MalformedManifest pointing at
        the offending line.
        """
        data = path.read_bytes()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            line_number = data.count(b"\n", 0, e.start) + 1
            line = data.split(b"\n")[line_number - 1].decode("utf-8", "backslashreplace")
            raise MalformedManifest(line_number, line, "invalid UTF-8") from e
        return cls.parse(text)
