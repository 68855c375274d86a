"""Namespaced: key-prefixed view over a KV backend."""

from typing import Iterable, Mapping

from .base import KVStore


class Namespaced(KVStore):
    """A namespaced view over another ``KVStore``.

    Keys are prefixed with ``namespace/``. Nested namespaces are
    supported by wrapping another Namespaced instance. Used to keep
    several projects side by side in one backend.

    Args:
        store: The backend to wrap.
        namespace: The namespace name (must not contain ``/``).
    """

    def __init__(self, store: KVStore, namespace: str) -> None:
        if not namespace:
            raise ValueError("Namespace names cannot be empty")
        if "/" in namespace:
            raise ValueError("Namespace names cannot contain '/'")

        if isinstance(store, Namespaced):
            self._store = store._store
            self.namespace = f"{store.namespace}/{namespace}"
        else:
            self._store = store
            self.namespace = namespace

    def _prefixed(self, key: str) -> str:
        return f"{self.namespace}/{key}"

    def get(self, key: str) -> bytes | None:
        return self._store.get(self._prefixed(key))

    def set(self, key: str, value: bytes) -> None:
        self._store.set(self._prefixed(key), value)

    def set_many(self, values: Mapping[str, bytes]) -> None:
        self._store.set_many({self._prefixed(k): v for k, v in values.items()})

    def keys(self) -> Iterable[str]:
        """All keys under this namespace, including nested ones."""
        prefix = f"{self.namespace}/"
        for key in self._store.keys():
            if key.startswith(prefix):
                yield key[len(prefix):]

    def __contains__(self, key: str) -> bool:
        return self._prefixed(key) in self._store

    def remove_many(self, *keys: str) -> None:
        self._store.remove_many(*(self._prefixed(k) for k in keys))

    def clear(self) -> None:
        """Remove every key in this namespace (and nested ones)."""
        self.remove_many(*list(self.keys()))
