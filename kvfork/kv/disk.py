"""Disk-backed KV backend using diskcache."""

from typing import Iterable, Mapping, cast

from .base import KVStore, check_bytes


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + mmap).

    ``size_limit=0`` by default: diskcache must never evict repository
    state to make room.
    """

    def __init__(self, directory: str, size_limit: int = 0) -> None:
        from diskcache import Cache as DiskCache

        self.directory = directory
        self.store = DiskCache(
            directory, size_limit=size_limit, eviction_policy="none"
        )

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.store.get(key))

    def set(self, key: str, value: bytes) -> None:
        check_bytes(key, value)
        self.store[key] = value

    def set_many(self, values: Mapping[str, bytes]) -> None:
        for key, value in values.items():
            check_bytes(key, value)
        with self.store.transact():
            for key, value in values.items():
                self.store[key] = value

    def keys(self) -> Iterable[str]:
        for key in self.store.iterkeys():
            yield str(key)

    def __contains__(self, key: str) -> bool:
        return key in self.store

    def remove_many(self, *keys: str) -> None:
        with self.store.transact():
            for key in keys:
                self.store.delete(key, retry=False)

    def clear(self) -> None:
        self.store.clear()

    def close(self) -> None:
        """Release the underlying SQLite connection."""
        self.store.close()
