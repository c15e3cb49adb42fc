"""Digest algorithm registry: one streaming interface over every supported hash."""

from checksums_core.algorithms.base import Accumulator
from checksums_core.algorithms.registry import (
    DEFAULT_ALGORITHM,
    DigestAlgorithm,
    digest_bytes,
    parse_algorithms,
)

__all__ = [
    "DEFAULT_ALGORITHM",
    "Accumulator",
    "DigestAlgorithm",
    "digest_bytes",
    "parse_algorithms",
]
