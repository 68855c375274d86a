"""Persistence: whole-collection load/save of repository state."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from .errors import IntegrityError
from .kv.base import KVStore
from .kv.memory import Memory
from .version import MAIN_BRANCH, Version

logger = logging.getLogger(__name__)

VERSIONS_KEY = "__versions__"
BRANCHES_KEY = "__branches__"
ACTIVE_BRANCH_KEY = "__active_branch__"
STATE_KEYS = (VERSIONS_KEY, BRANCHES_KEY, ACTIVE_BRANCH_KEY)


def _to_bytes(obj: Any) -> bytes:
    """Encode a JSON-safe Python object to bytes."""
    return json.dumps(obj, separators=(",", ":")).encode()


def _from_bytes(raw: bytes) -> Any:
    """Decode bytes to a Python object."""
    return json.loads(raw)


@runtime_checkable
class Persistence(Protocol):
    """What a Repository needs from its storage collaborator.

    Every call reads or writes a whole collection; there is no
    partial-update API. An implementation may also offer
    ``save_state(versions, branches, active_branch)`` to write all
    three collections as one batch; ``Repository`` uses it when present
    and otherwise saves versions, branches and the active branch in
    that order.
    """

    def load_versions(self) -> list[Version]: ...
    def save_versions(self, versions: Iterable[Version]) -> None: ...
    def load_branches(self) -> dict[str, str | None]: ...
    def save_branches(self, branches: Mapping[str, str | None]) -> None: ...
    def load_active_branch(self) -> str: ...
    def save_active_branch(self, name: str) -> None: ...


class KVPersistence:
    """``Persistence`` over a bytes ``KVStore``.

    Versions are stored as a JSON list of records, branches as a JSON
    name -> head id object, the active branch as a JSON string.

    Args:
        store: Backend to write to (default: a fresh ``Memory``).
    """

    def __init__(self, store: KVStore | None = None) -> None:
        self.store = store if store is not None else Memory()

    def _load(self, key: str, default: Any) -> Any:
        raw = self.store.get(key)
        if raw is None:
            return default
        try:
            return _from_bytes(raw)
        except ValueError as exc:
            raise IntegrityError(f"Stored {key} is not valid JSON: {exc}") from exc

    # -- Versions --

    def load_versions(self) -> list[Version]:
        records = self._load(VERSIONS_KEY, [])
        try:
            return [Version.from_record(r) for r in records]
        except (KeyError, TypeError) as exc:
            raise IntegrityError(f"Malformed version record: {exc}") from exc

    def save_versions(self, versions: Iterable[Version]) -> None:
        self.store.set(VERSIONS_KEY, _encode_versions(versions))

    # -- Branches --

    def load_branches(self) -> dict[str, str | None]:
        branches = dict(self._load(BRANCHES_KEY, {}))
        branches.setdefault(MAIN_BRANCH, None)
        return branches

    def save_branches(self, branches: Mapping[str, str | None]) -> None:
        self.store.set(BRANCHES_KEY, _to_bytes(dict(branches)))

    # -- Active branch --

    def load_active_branch(self) -> str:
        return self._load(ACTIVE_BRANCH_KEY, MAIN_BRANCH) or MAIN_BRANCH

    def save_active_branch(self, name: str) -> None:
        self.store.set(ACTIVE_BRANCH_KEY, _to_bytes(name))

    # -- Whole state --

    def save_state(
        self,
        versions: Iterable[Version],
        branches: Mapping[str, str | None],
        active_branch: str,
    ) -> None:
        # Encode everything before writing so a bad value writes nothing
        batch = {
            VERSIONS_KEY: _encode_versions(versions),
            BRANCHES_KEY: _to_bytes(dict(branches)),
            ACTIVE_BRANCH_KEY: _to_bytes(active_branch),
        }
        self.store.set_many(batch)
        logger.debug("Saved state (%d bytes)", sum(len(v) for v in batch.values()))

    def clear(self) -> None:
        """Drop all persisted repository state."""
        self.store.remove_many(*STATE_KEYS)


def _encode_versions(versions: Iterable[Version]) -> bytes:
    return _to_bytes([v.to_record() for v in versions])
