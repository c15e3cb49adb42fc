"""Parallel hash dispatcher: turns a file list into a Manifest on a worker pool."""

from checksums_core.dispatcher.dispatcher import HashDispatcher, HashRun, ProgressCallback, hash_file

__all__ = ["HashDispatcher", "HashRun", "ProgressCallback", "hash_file"]
