"""Tests for the digest algorithm registry."""

from __future__ import annotations

import hashlib
import zlib

import pytest

from checksums_core.algorithms import DEFAULT_ALGORITHM, DigestAlgorithm, digest_bytes, parse_algorithms
from checksums_core.algorithms.crc import CRC8, CRC16, CRC32C, CRC64, CrcAccumulator
from checksums_core.errors import UnsupportedAlgorithm

CHECK_INPUT = b"123456789"
PAYLOAD = bytes(range(256)) * 20 + b"tail bytes that do not align"


# ── Known answers ────────────────────────────────────────────────────


def test_md5_of_hello():
    """MD5 of b"hello" matches the well-known digest."""
    assert digest_bytes(DigestAlgorithm.md5, b"hello").hex() == "5d41402abc4b2a76b9719d911017c592"


def test_md5_of_empty_input():
    """Finalizing without input yields the empty-string digest."""
    assert digest_bytes(DigestAlgorithm.md5, b"").hex() == "d41d8cd98f00b204e9800998ecf8427e"


@pytest.mark.parametrize(
    "alg, hashlib_name",
    [
        (DigestAlgorithm.sha1, "sha1"),
        (DigestAlgorithm.sha224, "sha224"),
        (DigestAlgorithm.sha256, "sha256"),
        (DigestAlgorithm.sha384, "sha384"),
        (DigestAlgorithm.sha512, "sha512"),
        (DigestAlgorithm.sha3_224, "sha3_224"),
        (DigestAlgorithm.sha3_256, "sha3_256"),
        (DigestAlgorithm.sha3_384, "sha3_384"),
        (DigestAlgorithm.sha3_512, "sha3_512"),
        (DigestAlgorithm.blake2b, "blake2b"),
        (DigestAlgorithm.blake2s, "blake2s"),
    ],
)
def test_hashlib_variants_match_hashlib(alg, hashlib_name):
    """Every hashlib-backed algorithm agrees with hashlib itself."""
    assert digest_bytes(alg, PAYLOAD) == hashlib.new(hashlib_name, PAYLOAD).digest()


@pytest.mark.parametrize("params", [CRC8, CRC16, CRC32C, CRC64], ids=lambda p: p.name)
def test_crc_check_values(params):
    """Each CRC variant reproduces its catalogued check value for '123456789'."""
    acc = CrcAccumulator(params)
    acc.update(CHECK_INPUT)
    assert int.from_bytes(acc.finalize(), "big") == params.check


def test_crc32_matches_zlib():
    """CRC-32 agrees with zlib.crc32, big-endian."""
    assert digest_bytes(DigestAlgorithm.crc32, CHECK_INPUT).hex() == "cbf43926"
    assert int.from_bytes(digest_bytes(DigestAlgorithm.crc32, PAYLOAD), "big") == zlib.crc32(PAYLOAD)


def test_registry_crc_widths():
    """CRC digests are as wide as the CRC."""
    assert digest_bytes(DigestAlgorithm.crc8, CHECK_INPUT).hex() == "f4"
    assert digest_bytes(DigestAlgorithm.crc16, CHECK_INPUT).hex() == "bb3d"
    assert digest_bytes(DigestAlgorithm.crc32c, CHECK_INPUT).hex() == "e3069283"
    assert digest_bytes(DigestAlgorithm.crc64, CHECK_INPUT).hex() == "995dc9bbdf1939fa"


def test_xor8():
    """XOR-8 folds every byte into one."""
    assert digest_bytes(DigestAlgorithm.xor8, CHECK_INPUT).hex() == "31"
    assert digest_bytes(DigestAlgorithm.xor8, b"").hex() == "00"


# ── Uniform contract ─────────────────────────────────────────────────


@pytest.mark.parametrize("alg", list(DigestAlgorithm), ids=lambda a: a.value)
def test_chunking_invariance(alg):
    """Any split of the stream yields the same digest as one update."""
    expected = digest_bytes(alg, PAYLOAD)
    for size in (1, 3, 7, 64, 1000, 4096, len(PAYLOAD)):
        acc = alg.new()
        for i in range(0, len(PAYLOAD), size):
            acc.update(PAYLOAD[i : i + size])
        assert acc.finalize() == expected, f"chunk size {size}"


@pytest.mark.parametrize("alg", list(DigestAlgorithm), ids=lambda a: a.value)
def test_digest_size_matches_output(alg):
    """Declared digest_size equals the finalized length."""
    assert len(digest_bytes(alg, b"abc")) == alg.digest_size


def test_empty_updates_are_noops():
    """Empty chunks do not change the digest."""
    acc = DigestAlgorithm.sha256.new()
    acc.update(b"")
    acc.update(b"hel")
    acc.update(b"")
    acc.update(b"lo")
    assert acc.finalize() == hashlib.sha256(b"hello").digest()


def test_finalize_only_once():
    """A finalized accumulator refuses further use."""
    acc = DigestAlgorithm.md5.new()
    acc.update(b"x")
    acc.finalize()
    with pytest.raises(RuntimeError):
        acc.finalize()
    with pytest.raises(RuntimeError):
        acc.update(b"y")


def test_accumulators_are_independent():
    """Two accumulators for one algorithm share no state."""
    a = DigestAlgorithm.crc32c.new()
    b = DigestAlgorithm.crc32c.new()
    a.update(b"one")
    b.update(b"two")
    assert a.finalize() != b.finalize()


def test_hexdigest_is_lowercase():
    """Hex output is lowercase."""
    acc = DigestAlgorithm.sha1.new()
    acc.update(b"hello")
    assert acc.hexdigest() == "aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"


# ── Name resolution ──────────────────────────────────────────────────


@pytest.mark.parametrize(
    "name, expected",
    [
        ("md5", DigestAlgorithm.md5),
        ("MD5", DigestAlgorithm.md5),
        ("SHA1", DigestAlgorithm.sha1),
        ("SHA2", DigestAlgorithm.sha256),
        ("sha-256", DigestAlgorithm.sha256),
        ("SHA2-512", DigestAlgorithm.sha512),
        ("SHA3", DigestAlgorithm.sha3_256),
        ("sha3_384", DigestAlgorithm.sha3_384),
        ("sha3-512", DigestAlgorithm.sha3_512),
        ("BLAKE2", DigestAlgorithm.blake2b),
        ("blake2s", DigestAlgorithm.blake2s),
        ("CRC32C", DigestAlgorithm.crc32c),
        (" crc64 ", DigestAlgorithm.crc64),
    ],
)
def test_parse_aliases(name, expected):
    """Legacy and punctuated names resolve to canonical members."""
    assert DigestAlgorithm.parse(name) is expected


def test_parse_passes_members_through():
    """Parsing a member returns it unchanged."""
    assert DigestAlgorithm.parse(DigestAlgorithm.crc8) is DigestAlgorithm.crc8


@pytest.mark.parametrize("name", ["sha4", "md6", "blake", "", "whirlpool"])
def test_parse_unknown_raises(name):
    """Unknown names raise UnsupportedAlgorithm carrying the name."""
    with pytest.raises(UnsupportedAlgorithm) as exc_info:
        DigestAlgorithm.parse(name)
    assert exc_info.value.name == name


def test_unsupported_algorithm_is_value_error():
    """UnsupportedAlgorithm is also a ValueError."""
    with pytest.raises(ValueError):
        DigestAlgorithm.parse("nope")


def test_parse_algorithms_dedupes_in_order():
    """Repeats are dropped, first occurrence wins."""
    assert parse_algorithms(["sha256", "MD5", "SHA2", "md5"]) == (
        DigestAlgorithm.sha256,
        DigestAlgorithm.md5,
    )


def test_parse_algorithms_rejects_empty():
    """An empty list is an error."""
    with pytest.raises(UnsupportedAlgorithm):
        parse_algorithms([])


def test_default_algorithm_is_sha1():
    """SHA-1 is the default."""
    assert DEFAULT_ALGORITHM is DigestAlgorithm.sha1
