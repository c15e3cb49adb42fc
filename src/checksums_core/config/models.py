import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from checksums_core.algorithms import DEFAULT_ALGORITHM, DigestAlgorithm, parse_algorithms

DEFAULT_CHUNK_SIZE = 64 * 1024


class WalkerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_depth: int | None = None
    include_pattern: str | None = None
    exclude_pattern: str | None = None
    follow_symlinks: bool = False
    include_hidden: bool = False
    ignore_patterns: list[str] = Field(default_factory=list)

    @field_validator("max_depth")
    @classmethod
    def normalize_depth(cls, v: int | None) -> int | None:
        # -1 (or any negative) means unlimited, as on the command line
        if v is not None and v < 0:
            return None
        return v

    @field_validator("include_pattern", "exclude_pattern")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid regular expression {v!r}: {e}") from e
        return v


class HashConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    algorithms: tuple[DigestAlgorithm, ...] = (DEFAULT_ALGORITHM,)
    concurrency: int | None = Field(default=None, gt=0)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)

    @field_validator("algorithms", mode="before")
    @classmethod
    def resolve_algorithms(cls, v: object) -> tuple[DigestAlgorithm, ...]:
        if isinstance(v, str):
            v = [part for part in v.split(",") if part.strip()]
        return parse_algorithms(v)


class RunConfig(BaseModel):
    """Everything one create/verify invocation needs, resolved up front."""

    model_config = ConfigDict(frozen=True)

    root_path: Path
    walker: WalkerConfig = Field(default_factory=WalkerConfig)
    hashing: HashConfig = Field(default_factory=HashConfig)
    output_manifest_path: Path | None = None
    compare_against_path: Path | None = None


class ChecksumsConfig(BaseModel):
    walker: WalkerConfig = Field(default_factory=WalkerConfig)
    hashing: HashConfig = Field(default_factory=HashConfig)
    manifest_suffix: str = Field(default=".hash", min_length=1)
    log_level: Literal["debug", "info", "warn", "error"] = "warn"
    log_format: Literal["text", "json"] = "text"
