from .loader import config_search_paths, load_config, resolve_config
from .models import (
    DEFAULT_CHUNK_SIZE,
    ChecksumsConfig,
    HashConfig,
    RunConfig,
    WalkerConfig,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ChecksumsConfig",
    "HashConfig",
    "RunConfig",
    "WalkerConfig",
    "config_search_paths",
    "load_config",
    "resolve_config",
]
