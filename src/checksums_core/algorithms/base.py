"""Abstract streaming accumulator shared by every digest algorithm."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Accumulator(ABC):
    """Stateful digest computation over a byte stream.

    ``update`` may be called any number of times with chunks of any size.
    ``finalize`` may be called exactly once and returns the fixed-width
    digest; further calls to either method raise ``RuntimeError``.
    """

    name: str = ""
    digest_size: int = 0

    def __init__(self) -> None:
        self._finalized = False

    def update(self, data: bytes) -> None:
        if self._finalized:
            raise RuntimeError(f"{self.name} accumulator already finalized")
        if data:
            self._update(data)

    def finalize(self) -> bytes:
        if self._finalized:
            raise RuntimeError(f"{self.name} accumulator already finalized")
        self._finalized = True
        return self._digest()

    def hexdigest(self) -> str:
        """Finalize and return the lowercase hex rendering."""
        return self.finalize().hex()

    @abstractmethod
    def _update(self, data: bytes) -> None:
        ...

    @abstractmethod
    def _digest(self) -> bytes:
        ...
