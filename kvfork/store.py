"""Factory for repositories with sensible defaults."""

from __future__ import annotations

from typing import Callable, Literal

from .kv.base import KVStore
from .persistence import KVPersistence
from .repository import Repository
from .version import DEFAULT_AUTHOR


def backend(
    storage: Literal["memory", "disk"] = "memory",
    *,
    path: str | None = None,
) -> KVStore:
    """Build a KV backend.

    Args:
        storage: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``storage="disk"``. Directory path for
            the disk backend.
    """
    if storage == "memory":
        from .kv.memory import Memory

        return Memory()
    if storage == "disk":
        if path is None:
            raise ValueError("path is required when storage='disk'")
        from .kv.disk import Disk

        return Disk(path)
    raise ValueError(f"Unknown storage: {storage!r}")


def open_repository(
    storage: Literal["memory", "disk"] = "memory",
    *,
    path: str | None = None,
    project: str | None = None,
    author: str = DEFAULT_AUTHOR,
    clock: Callable[[], float] | None = None,
) -> Repository:
    """Open (or create) a repository.

    Args:
        storage: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``storage="disk"``.
        project: Keep the repository under this key namespace, so
            several repositories can share one backend.
        author: Default author for commits.
        clock: Time source for Version timestamps.

    Returns:
        A ``Repository`` whose active branch and working data are
        restored from the backend.
    """
    kv = backend(storage, path=path)
    if project is not None:
        from .kv.namespaced import Namespaced

        kv = Namespaced(kv, project)
    return Repository(KVPersistence(kv), author=author, clock=clock)
