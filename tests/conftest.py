"""Shared test fixtures for checksums."""

from pathlib import Path

import pytest

from checksums_core.config.models import ChecksumsConfig


@pytest.fixture
def sample_config():
    return ChecksumsConfig()


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """A small tree with nested dirs, a hidden file, and known contents."""
    root = tmp_path / "tree"
    root.mkdir()
    (root / "a.txt").write_text("hello")
    (root / "b.txt").write_text("world")
    (root / "src").mkdir()
    (root / "src" / "main.py").write_text("print('hi')")
    (root / "src" / "deep").mkdir()
    (root / "src" / "deep" / "leaf.bin").write_bytes(bytes(range(256)) * 4)
    (root / ".hidden").write_text("secret")
    return root
