"""Canonical text form of a manifest.

One record per line, sorted by path::

    # checksums manifest v1
    # algorithms: md5,sha256
    docs/a.txt  md5:5d41402abc4b2a76b9719d911017c592,sha256:2cf24dba...
    locked.bin  !FileIOError

The path and the token field are separated by two spaces. Tokens never
contain spaces, so a record always splits on its last two-space run, even
when the path itself contains spaces. Backslash, newline, carriage return
and a leading ``#`` are escaped in paths so every line stays one record;
filename bytes that are not valid UTF-8 are written as ``\\xHH``.
"""

from __future__ import annotations

import re

from checksums_core.algorithms import DigestAlgorithm, parse_algorithms
from checksums_core.errors import DuplicatePathError, MalformedManifest, UnsupportedAlgorithm
from checksums_core.manifest.models import DigestRecord, Manifest

FORMAT_HEADER = "# checksums manifest v1"
DELIMITER = "  "

_ALGORITHMS_RE = re.compile(r"#\s*algorithms:\s*(?P<names>.*)")
_DIGEST_TOKEN_RE = re.compile(r"(?P<alg>[a-z0-9-]+):(?P<hex>[0-9a-f]+)")
_ERROR_TOKEN_RE = re.compile(r"!(?P<kind>[A-Za-z]\w*)")

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "#": "#"}

# os.fsdecode maps each undecodable filename byte 0x80-0xff to U+DC80-U+DCFF
_SURROGATE_BASE = 0xDC00
_HEX_BYTE_RE = re.compile(r"[0-9a-f]{2}")


def _escape_char(ch: str) -> str:
    if ch in _ESCAPES:
        return _ESCAPES[ch]
    if 0xDC80 <= ord(ch) <= 0xDCFF:
        return f"\\x{ord(ch) - _SURROGATE_BASE:02x}"
    return ch


def escape_path(path: str) -> str:
    """Make *path* safe for one manifest line.

    Filename bytes that are not valid UTF-8 become ``\\xHH`` so the raw
    name survives a save/load cycle.
    """
    escaped = "".join(_escape_char(ch) for ch in path)
    if escaped.startswith("#"):
        escaped = "\\" + escaped
    return escaped


def unescape_path(text: str) -> str:
    """Reverse ``escape_path``; ValueError on a dangling or unknown escape."""
    out: list[str] = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, None)
        if nxt == "x":
            digits = next(chars, "") + next(chars, "")
            if not _HEX_BYTE_RE.fullmatch(digits) or int(digits, 16) < 0x80:
                raise ValueError(f"invalid escape sequence \\x{digits}")
            out.append(chr(_SURROGATE_BASE + int(digits, 16)))
            continue
        if nxt is None or nxt not in _UNESCAPES:
            raise ValueError(f"invalid escape sequence \\{nxt or ''}")
        out.append(_UNESCAPES[nxt])
    return "".join(out)


def _render_record(record: DigestRecord, algorithms: tuple[DigestAlgorithm, ...]) -> str:
    if record.is_error:
        return f"!{record.error}"
    return ",".join(
        f"{alg.value}:{record.digests[alg].hex()}" for alg in algorithms if alg in record.digests
    )


def serialize(manifest: Manifest) -> str:
    """Render *manifest* as sorted, newline-terminated UTF-8 text."""
    lines = [
        FORMAT_HEADER,
        f"# algorithms: {','.join(alg.value for alg in manifest.algorithms)}",
    ]
    for path, record in manifest.entries.items():
        lines.append(f"{escape_path(path)}{DELIMITER}{_render_record(record, manifest.algorithms)}")
    return "\n".join(lines) + "\n"


def _parse_record(line_number: int, line: str) -> tuple[str, DigestRecord]:
    if DELIMITER not in line:
        raise MalformedManifest(line_number, line, "missing path/digest delimiter")
    raw_path, field = line.rsplit(DELIMITER, 1)
    if not raw_path:
        raise MalformedManifest(line_number, line, "empty path")
    try:
        path = unescape_path(raw_path)
    except ValueError as e:
        raise MalformedManifest(line_number, line, str(e)) from e
    if path.startswith("/"):
        raise MalformedManifest(line_number, line, "path must be relative")

    error_match = _ERROR_TOKEN_RE.fullmatch(field)
    if error_match:
        return path, DigestRecord.failed(error_match.group("kind"))

    digests: dict[DigestAlgorithm, bytes] = {}
    for token in field.split(","):
        m = _DIGEST_TOKEN_RE.fullmatch(token)
        if m is None:
            raise MalformedManifest(line_number, line, f"bad digest token {token!r}")
        try:
            alg = DigestAlgorithm.parse(m.group("alg"))
        except UnsupportedAlgorithm as e:
            raise MalformedManifest(line_number, line, str(e)) from e
        if alg in digests:
            raise MalformedManifest(line_number, line, f"{alg.value} listed twice")
        digest = bytes.fromhex(m.group("hex")) if len(m.group("hex")) % 2 == 0 else b""
        if len(digest) != alg.digest_size:
            raise MalformedManifest(
                line_number, line, f"{alg.value} digest must be {alg.digest_size * 2} hex digits"
            )
        digests[alg] = digest
    return path, DigestRecord(digests=digests)


def parse(text: str) -> Manifest:
    """Parse the text form back into a Manifest.

    Comment lines start with ``#``; the ``# algorithms:`` header, when
    present, fixes the manifest's algorithm set and order. Without it the
    set is taken from the records in first-seen order.
    """
    lines = text.split("\n")
    if text and lines[-1] != "":
        raise MalformedManifest(len(lines), lines[-1], "missing trailing newline")

    declared: tuple[DigestAlgorithm, ...] | None = None
    seen: list[DigestAlgorithm] = []
    entries: dict[str, DigestRecord] = {}

    for line_number, line in enumerate(lines[:-1], start=1):
        line = line.removesuffix("\r")
        if not line.strip():
            continue
        if line.startswith("#"):
            m = _ALGORITHMS_RE.fullmatch(line)
            if m is not None and declared is None:
                names = [n for n in m.group("names").split(",") if n.strip()]
                try:
                    declared = parse_algorithms(names) if names else ()
                except UnsupportedAlgorithm as e:
                    raise MalformedManifest(line_number, line, str(e)) from e
            continue

        path, record = _parse_record(line_number, line)
        if path in entries:
            raise MalformedManifest(line_number, line, str(DuplicatePathError(path)))
        if declared is not None:
            extra = record.algorithms - set(declared)
            if extra:
                names = ",".join(sorted(a.value for a in extra))
                raise MalformedManifest(line_number, line, f"undeclared algorithm {names}")
        for alg in record.digests:
            if alg not in seen:
                seen.append(alg)
        entries[path] = record

    return Manifest(
        entries=entries,
        algorithms=declared if declared is not None else tuple(seen),
    )
