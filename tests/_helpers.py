"""Record and manifest builders shared by the test modules."""

from checksums_core.algorithms import DigestAlgorithm
from checksums_core.manifest import DigestRecord, Manifest

HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"
HELLO_SHA1 = "aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"
HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


def make_record(**hexdigests: str) -> DigestRecord:
    """Build a record from keyword hex digests, e.g. make_record(md5="...")."""
    return DigestRecord(
        digests={
            DigestAlgorithm.parse(name.replace("_", "-")): bytes.fromhex(h)
            for name, h in hexdigests.items()
        }
    )


def md5_record(fill: str) -> DigestRecord:
    """An md5 record whose digest is *fill* repeated to 32 hex digits."""
    return make_record(md5=(fill * 32)[:32])


def make_manifest(entries: dict[str, DigestRecord], algorithms=(DigestAlgorithm.md5,)) -> Manifest:
    return Manifest.build(entries.items(), algorithms=algorithms)
