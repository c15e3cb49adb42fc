"""The closed catalog of supported digest algorithms."""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterable
from enum import Enum

from checksums_core.algorithms.base import Accumulator
from checksums_core.algorithms.crc import (
    CRC8,
    CRC16,
    CRC32C,
    CRC64,
    Crc32Accumulator,
    CrcAccumulator,
    Xor8Accumulator,
)
from checksums_core.errors import UnsupportedAlgorithm


class DigestAlgorithm(str, Enum):
    """Every digest a manifest may carry. Values are the on-disk names."""

    md5 = "md5"
    sha1 = "sha1"
    sha224 = "sha224"
    sha256 = "sha256"
    sha384 = "sha384"
    sha512 = "sha512"
    sha3_224 = "sha3-224"
    sha3_256 = "sha3-256"
    sha3_384 = "sha3-384"
    sha3_512 = "sha3-512"
    blake2b = "blake2b"
    blake2s = "blake2s"
    crc64 = "crc64"
    crc32 = "crc32"
    crc32c = "crc32c"
    crc16 = "crc16"
    crc8 = "crc8"
    xor8 = "xor8"

    def new(self) -> Accumulator:
        """Return a fresh accumulator for this algorithm."""
        return _FACTORIES[self]()

    @property
    def digest_size(self) -> int:
        """Width of the finalized digest in bytes."""
        return _DIGEST_SIZES[self]

    @classmethod
    def parse(cls, name: str) -> DigestAlgorithm:
        """Resolve a user-supplied name, case- and punctuation-insensitively.

        Accepts the canonical names plus the legacy spellings
        (``SHA2``, ``SHA3``, ``BLAKE2``, ...).
        """
        if isinstance(name, cls):
            return name
        key = _normalize(str(name))
        try:
            return _ALIASES[key]
        except KeyError:
            raise UnsupportedAlgorithm(
                name,
                f"unsupported algorithm: {name!r}. "
                f"Supported: {', '.join(a.value for a in cls)}",
            ) from None


DEFAULT_ALGORITHM = DigestAlgorithm.sha1


class _HashlibAccumulator(Accumulator):
    def __init__(self, hashlib_name: str, name: str) -> None:
        super().__init__()
        self.name = name
        self._hash = hashlib.new(hashlib_name, usedforsecurity=False)
        self.digest_size = self._hash.digest_size

    def _update(self, data: bytes) -> None:
        self._hash.update(data)

    def _digest(self) -> bytes:
        return self._hash.digest()


def _hashlib(hashlib_name: str, alg: DigestAlgorithm) -> Callable[[], Accumulator]:
    return lambda: _HashlibAccumulator(hashlib_name, alg.value)


_FACTORIES: dict[DigestAlgorithm, Callable[[], Accumulator]] = {
    DigestAlgorithm.md5: _hashlib("md5", DigestAlgorithm.md5),
    DigestAlgorithm.sha1: _hashlib("sha1", DigestAlgorithm.sha1),
    DigestAlgorithm.sha224: _hashlib("sha224", DigestAlgorithm.sha224),
    DigestAlgorithm.sha256: _hashlib("sha256", DigestAlgorithm.sha256),
    DigestAlgorithm.sha384: _hashlib("sha384", DigestAlgorithm.sha384),
    DigestAlgorithm.sha512: _hashlib("sha512", DigestAlgorithm.sha512),
    DigestAlgorithm.sha3_224: _hashlib("sha3_224", DigestAlgorithm.sha3_224),
    DigestAlgorithm.sha3_256: _hashlib("sha3_256", DigestAlgorithm.sha3_256),
    DigestAlgorithm.sha3_384: _hashlib("sha3_384", DigestAlgorithm.sha3_384),
    DigestAlgorithm.sha3_512: _hashlib("sha3_512", DigestAlgorithm.sha3_512),
    DigestAlgorithm.blake2b: _hashlib("blake2b", DigestAlgorithm.blake2b),
    DigestAlgorithm.blake2s: _hashlib("blake2s", DigestAlgorithm.blake2s),
    DigestAlgorithm.crc64: lambda: CrcAccumulator(CRC64),
    DigestAlgorithm.crc32: Crc32Accumulator,
    DigestAlgorithm.crc32c: lambda: CrcAccumulator(CRC32C),
    DigestAlgorithm.crc16: lambda: CrcAccumulator(CRC16),
    DigestAlgorithm.crc8: lambda: CrcAccumulator(CRC8),
    DigestAlgorithm.xor8: Xor8Accumulator,
}

_DIGEST_SIZES: dict[DigestAlgorithm, int] = {
    alg: factory().digest_size for alg, factory in _FACTORIES.items()
}


def _normalize(name: str) -> str:
    return name.strip().lower().replace("-", "").replace("_", "")


_ALIASES: dict[str, DigestAlgorithm] = {
    _normalize(alg.value): alg for alg in DigestAlgorithm
}
_ALIASES.update(
    {
        "sha2": DigestAlgorithm.sha256,
        "sha3": DigestAlgorithm.sha3_256,
        "blake2": DigestAlgorithm.blake2b,
        "sha2224": DigestAlgorithm.sha224,
        "sha2256": DigestAlgorithm.sha256,
        "sha2384": DigestAlgorithm.sha384,
        "sha2512": DigestAlgorithm.sha512,
        "crc32ieee": DigestAlgorithm.crc32,
    }
)


def parse_algorithms(names: Iterable[str | DigestAlgorithm]) -> tuple[DigestAlgorithm, ...]:
    """Resolve a list of names into a de-duplicated, order-preserving tuple.

    Raises UnsupportedAlgorithm for an unknown name or an empty list.
    """
    resolved: list[DigestAlgorithm] = []
    for name in names:
        alg = DigestAlgorithm.parse(name)
        if alg not in resolved:
            resolved.append(alg)
    if not resolved:
        raise UnsupportedAlgorithm("", "at least one algorithm is required")
    return tuple(resolved)


def digest_bytes(alg: DigestAlgorithm, data: bytes) -> bytes:
    """One-shot digest of an in-memory buffer."""
    acc = alg.new()
    acc.update(data)
    return acc.finalize()
