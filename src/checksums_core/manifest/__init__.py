"""Manifest model and its canonical text serialization."""

from checksums_core.manifest.codec import FORMAT_HEADER, escape_path, parse, serialize, unescape_path
from checksums_core.manifest.models import DigestRecord, Manifest

__all__ = [
    "FORMAT_HEADER",
    "DigestRecord",
    "Manifest",
    "escape_path",
    "parse",
    "serialize",
    "unescape_path",
]
