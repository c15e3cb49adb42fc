"""Checksums Core - hashing and verification engine for directory trees."""

from checksums_core.algorithms import DigestAlgorithm, parse_algorithms
from checksums_core.comparator import DiffEntry, DiffReport, DiffStatus, compare
from checksums_core.config import ChecksumsConfig, HashConfig, RunConfig, WalkerConfig, load_config
from checksums_core.dispatcher import HashDispatcher, HashRun
from checksums_core.engine import VerifyResult, create_manifest, verify_tree
from checksums_core.errors import (
    Aborted,
    ChecksumsError,
    CyclicTraversal,
    DuplicatePathError,
    EntryError,
    FileAccessError,
    FileIOError,
    IncomparableAlgorithmSet,
    MalformedManifest,
    UnsupportedAlgorithm,
)
from checksums_core.manifest import DigestRecord, Manifest
from checksums_core.walker import FileEntry, TreeWalker

__version__ = "0.1.0"

__all__ = [
    "Aborted",
    "ChecksumsConfig",
    "ChecksumsError",
    "CyclicTraversal",
    "DiffEntry",
    "DiffReport",
    "DiffStatus",
    "DigestAlgorithm",
    "DigestRecord",
    "DuplicatePathError",
    "EntryError",
    "FileAccessError",
    "FileEntry",
    "FileIOError",
    "HashConfig",
    "HashDispatcher",
    "HashRun",
    "IncomparableAlgorithmSet",
    "MalformedManifest",
    "Manifest",
    "RunConfig",
    "TreeWalker",
    "UnsupportedAlgorithm",
    "VerifyResult",
    "WalkerConfig",
    "compare",
    "create_manifest",
    "load_config",
    "parse_algorithms",
    "verify_tree",
]
