"""Tests for the checksums CLI (create, verify, algorithms, config)."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from checksums.cli import _JsonFormatter, app
from checksums_core.algorithms import DigestAlgorithm
from checksums_core.manifest import Manifest

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep real user and project config out of CLI runs."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)


# ── checksums create ─────────────────────────────────────────────────


def test_create_writes_default_manifest_next_to_directory(sample_tree: Path):
    """Without -o the manifest lands beside the directory as <dir>.hash."""
    result = runner.invoke(app, ["create", str(sample_tree)])
    assert result.exit_code == 0, result.output
    assert "Wrote 4 entries" in result.output
    target = sample_tree.parent / "tree.hash"
    assert target.is_file()
    assert list(Manifest.load(target).entries) == ["a.txt", "b.txt", "src/deep/leaf.bin", "src/main.py"]


def test_create_with_explicit_output(sample_tree: Path, tmp_path: Path):
    """-o writes to the given path, creating parent dirs."""
    out = tmp_path / "out" / "custom.hash"
    result = runner.invoke(app, ["create", str(sample_tree), "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.is_file()
    assert not (tmp_path / "tree.hash").exists()


def test_create_multiple_algorithms(sample_tree: Path, tmp_path: Path):
    """-a accepts repeats and comma lists, in order."""
    out = tmp_path / "m.hash"
    result = runner.invoke(app, ["create", str(sample_tree), "-o", str(out), "-a", "md5,SHA2", "-a", "crc32"])
    assert result.exit_code == 0, result.output
    assert Manifest.load(out).algorithms == (
        DigestAlgorithm.md5,
        DigestAlgorithm.sha256,
        DigestAlgorithm.crc32,
    )


def test_create_depth_zero(sample_tree: Path, tmp_path: Path):
    """-d 0 hashes top-level files only."""
    out = tmp_path / "top.hash"
    result = runner.invoke(app, ["create", str(sample_tree), "-o", str(out), "-d", "0"])
    assert result.exit_code == 0, result.output
    assert list(Manifest.load(out).entries) == ["a.txt", "b.txt"]


def test_create_hidden_and_exclude(sample_tree: Path, tmp_path: Path):
    """--hidden and --exclude reach the walker."""
    out = tmp_path / "h.hash"
    result = runner.invoke(
        app, ["create", str(sample_tree), "-o", str(out), "--hidden", "--exclude", "^src/"]
    )
    assert result.exit_code == 0, result.output
    assert list(Manifest.load(out).entries) == [".hidden", "a.txt", "b.txt"]


def test_create_unsupported_algorithm_is_fatal(sample_tree: Path, tmp_path: Path):
    """An unknown algorithm exits 2 before writing anything."""
    result = runner.invoke(app, ["create", str(sample_tree), "-a", "sha9"])
    assert result.exit_code == 2
    assert "unsupported algorithm" in result.output
    assert not (tmp_path / "tree.hash").exists()


def test_create_missing_directory_is_fatal(tmp_path: Path):
    """A missing directory exits 2."""
    result = runner.invoke(app, ["create", str(tmp_path / "nope"), "-o", str(tmp_path / "x.hash")])
    assert result.exit_code == 2


def test_create_invalid_regex_is_fatal(sample_tree: Path):
    """A bad --include regex exits 2."""
    result = runner.invoke(app, ["create", str(sample_tree), "--include", "(oops"])
    assert result.exit_code == 2


def test_create_uses_config_file(sample_tree: Path, tmp_path: Path):
    """Settings from ./checksums.yaml apply when no flag overrides them."""
    (tmp_path / "checksums.yaml").write_text("hashing:\n  algorithms: [blake2s]\n")
    result = runner.invoke(app, ["create", str(sample_tree)])
    assert result.exit_code == 0, result.output
    assert Manifest.load(tmp_path / "tree.hash").algorithms == (DigestAlgorithm.blake2s,)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_create_reports_entry_errors(tmp_path: Path):
    """Per-entry errors are printed, the manifest is written, exit is 1."""
    root = tmp_path / "loopy"
    (root / "a").mkdir(parents=True)
    (root / "a" / "f.txt").write_text("x")
    (root / "a" / "loop").symlink_to(root, target_is_directory=True)
    result = runner.invoke(app, ["create", str(root), "--follow-symlinks"])
    assert result.exit_code == 1
    assert "error:" in result.output
    assert (tmp_path / "loopy.hash").is_file()


# ── checksums verify ─────────────────────────────────────────────────


def test_verify_unchanged(sample_tree: Path):
    """An untouched tree verifies OK with exit 0."""
    runner.invoke(app, ["create", str(sample_tree)])
    result = runner.invoke(app, ["verify", str(sample_tree)])
    assert result.exit_code == 0, result.output
    assert "OK" in result.output
    assert "4 unchanged" in result.output


def test_verify_explicit_manifest(sample_tree: Path, tmp_path: Path):
    """-m points verify at a manifest elsewhere."""
    out = tmp_path / "elsewhere.hash"
    runner.invoke(app, ["create", str(sample_tree), "-o", str(out), "-a", "md5"])
    result = runner.invoke(app, ["verify", str(sample_tree), "-m", str(out)])
    assert result.exit_code == 0, result.output


def test_verify_reports_changes(sample_tree: Path):
    """Modified, removed and added files are listed; exit is 1."""
    runner.invoke(app, ["create", str(sample_tree)])
    (sample_tree / "a.txt").write_text("HELLO")
    (sample_tree / "b.txt").unlink()
    (sample_tree / "c.txt").write_text("new")

    result = runner.invoke(app, ["verify", str(sample_tree)])
    assert result.exit_code == 1
    assert "MODIFIED a.txt" in result.output
    assert "REMOVED b.txt" in result.output
    assert "ADDED c.txt" in result.output
    assert "FAILED" in result.output
    assert "UNCHANGED" not in result.output


def test_verify_disjoint_algorithms_incomparable(sample_tree: Path):
    """Hashing with an algorithm the baseline lacks is incomparable."""
    runner.invoke(app, ["create", str(sample_tree), "-a", "md5"])
    result = runner.invoke(app, ["verify", str(sample_tree), "-a", "sha1"])
    assert result.exit_code == 1
    assert "INCOMPARABLE a.txt" in result.output


def test_verify_missing_manifest(sample_tree: Path):
    """No manifest on disk exits 2."""
    result = runner.invoke(app, ["verify", str(sample_tree)])
    assert result.exit_code == 2
    assert "Manifest not found" in result.output


def test_verify_malformed_manifest(sample_tree: Path, tmp_path: Path):
    """A malformed manifest exits 2 and names the line."""
    (tmp_path / "tree.hash").write_text("garbage without delimiter\n")
    result = runner.invoke(app, ["verify", str(sample_tree)])
    assert result.exit_code == 2
    assert "line 1" in result.output


def test_verify_manifest_not_utf8(sample_tree: Path, tmp_path: Path):
    """A manifest with undecodable bytes is a fatal error, not a traceback."""
    (tmp_path / "tree.hash").write_bytes(b"# checksums manifest v1\n\xff\xfe  md5:00\n")
    result = runner.invoke(app, ["verify", str(sample_tree)])
    assert result.exit_code == 2
    assert "line 2" in result.output


# ── checksums algorithms ─────────────────────────────────────────────


def test_algorithms_lists_everything():
    """One line per algorithm with its width in bits."""
    result = runner.invoke(app, ["algorithms"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert len(lines) == len(DigestAlgorithm)
    assert "md5\t128 bits" in lines
    assert "sha3-256\t256 bits" in lines
    assert "crc8\t8 bits" in lines


# ── checksums config ─────────────────────────────────────────────────


def test_config_show_defaults():
    """config show dumps the resolved settings as YAML."""
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "sha1" in result.output
    assert "manifest_suffix" in result.output


def test_config_init_and_force(tmp_path: Path):
    """config init refuses to overwrite unless --force."""
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert (tmp_path / "checksums.yaml").is_file()

    again = runner.invoke(app, ["config", "init"])
    assert again.exit_code == 1
    assert "already exists" in again.output

    forced = runner.invoke(app, ["config", "init", "--force"])
    assert forced.exit_code == 0


def test_missing_config_path_is_fatal(tmp_path: Path):
    """--config naming a missing file exits 2."""
    result = runner.invoke(app, ["--config", str(tmp_path / "absent.yaml"), "algorithms"])
    assert result.exit_code == 2
    assert "not found" in result.output


def test_unknown_log_level_is_fatal():
    """An unknown --log-level exits 2."""
    result = runner.invoke(app, ["--log-level", "loud", "algorithms"])
    assert result.exit_code == 2


# ── Logging ──────────────────────────────────────────────────────────


def test_json_formatter_emits_one_object():
    """JSON log format renders each record as one object."""
    record = logging.LogRecord("checksums_core.walker", logging.WARNING, __file__, 1, "Skipping %s", ("x",), None)
    data = json.loads(_JsonFormatter().format(record))
    assert data["level"] == "warning"
    assert data["logger"] == "checksums_core.walker"
    assert data["message"] == "Skipping x"


def test_config_show_names_source(tmp_path: Path):
    """``config show`` says which file the settings came from."""
    assert "built-in defaults" in runner.invoke(app, ["config", "show"]).output

    (tmp_path / "checksums.yaml").write_text("hashing:\n  algorithms: [md5]\n")
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "checksums.yaml" in result.output
    assert "md5" in result.output
