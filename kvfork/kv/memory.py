"""In-memory KV backend."""

import threading
from typing import Iterable, Mapping

from .base import KVStore, check_bytes


class Memory(KVStore):
    """A dict-backed KV store.

    Every operation holds a single lock, so a batch written by
    ``set_many`` is never observed half-applied.
    """

    def __init__(self) -> None:
        self.memory: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self.memory.get(key)

    def set(self, key: str, value: bytes) -> None:
        check_bytes(key, value)
        with self._lock:
            self.memory[key] = value

    def set_many(self, values: Mapping[str, bytes]) -> None:
        for key, value in values.items():
            check_bytes(key, value)
        with self._lock:
            self.memory.update(values)

    def keys(self) -> Iterable[str]:
        with self._lock:
            return list(self.memory.keys())

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self.memory

    def remove_many(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self.memory.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self.memory.clear()
