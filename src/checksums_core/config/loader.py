"""Config file discovery and YAML loading."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import ChecksumsConfig

PROJECT_CONFIG_NAME = "checksums.yaml"

# ${VAR} or ${VAR:-fallback}
_ENV_REF_RE = re.compile(r"\$\{(?P<name>\w+)(?::-(?P<default>[^}]*))?\}")


def config_search_paths(cli_path: str | None = None) -> list[Path]:
    """Candidate config files, highest priority first."""
    paths = [Path(PROJECT_CONFIG_NAME), Path.home() / ".checksums" / "config.yaml"]
    if cli_path:
        paths.insert(0, Path(cli_path))
    return paths


def resolve_config(cli_path: str | None = None) -> tuple[ChecksumsConfig, Path | None]:
    """Load the first non-empty config file and report which one it was.

    An explicit *cli_path* must exist. Empty files are skipped so a blank
    project file does not mask the user-global one. Returns the defaults
    and ``None`` when nothing is found.
    """
    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_search_paths(cli_path):
        if not path.is_file():
            continue
        raw = _read_yaml(path)
        if raw is None:
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config in {path}: expected a mapping, got {type(raw).__name__}")
        try:
            return ChecksumsConfig(**_expand_env_vars(raw)), path
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e

    return ChecksumsConfig(), None


def load_config(cli_path: str | None = None) -> ChecksumsConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config, _ = resolve_config(cli_path)
    return config


def _read_yaml(path: Path) -> object:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Cannot read {path}: {e}") from e


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} and ${VAR:-default} references in strings."""
    if isinstance(obj, str):
        return _ENV_REF_RE.sub(
            lambda m: os.environ.get(m.group("name"), m.group("default") or ""), obj
        )
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj

# Default YAML template for `checksums config init`
DEFAULT_CONFIG_TEMPLATE = """\
# checksums.yaml

# Tree walking
walker:
  max_depth: -1                # -1 = unlimited, 0 = top-level files only
  # include_pattern: "\\\\.py$"  # regex matched against the relative path
  # exclude_pattern: "^build/"
  follow_symlinks: false
  include_hidden: false
  # ignore_patterns: [.git, node_modules, __pycache__]

# Hashing
hashing:
  algorithms: [sha1]           # md5 | sha1 | sha256 | sha3-256 | blake2b | crc32 | ...
  # concurrency: 8             # default: number of CPUs
  chunk_size: 65536

# Manifest written next to the directory: <dir><manifest_suffix>
manifest_suffix: ".hash"

# Logging
log_level: "warn"              # debug | info | warn | error
log_format: "text"             # text | json
"""
