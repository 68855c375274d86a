"""Abstract KV backend interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


class KVStore(ABC):
    """Key-value backend operating on bytes only.

    Repository state is written as a handful of whole-collection blobs
    (see ``kvfork.persistence``). Encoding to bytes happens there; the
    backend only moves bytes around.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Set bytes value for key."""

    @abstractmethod
    def set_many(self, values: Mapping[str, bytes]) -> None:
        """Write several keys as one batch.

        Either every key is written or none is.
        """

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Iterate over all keys."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        """Check if key exists in store."""

    @abstractmethod
    def remove_many(self, *keys: str) -> None:
        """Remove several keys, ignoring ones that are absent."""

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        self.remove_many(key)

    @abstractmethod
    def clear(self) -> None:
        """Remove all items from the store."""


def check_bytes(key: str, value: object) -> None:
    """Raise TypeError unless ``value`` is bytes."""
    if not isinstance(value, bytes):
        raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
