"""Ancestor resolution over primary-parent links."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Mapping, Union

from .errors import IntegrityError
from .version import Version

if TYPE_CHECKING:
    from .snapshots import SnapshotStore

VersionLookup = Union[Mapping[str, Version], "SnapshotStore"]


def _as_mapping(versions: VersionLookup) -> Mapping[str, Version]:
    return getattr(versions, "by_id", versions)


def walk(version: Version, versions: VersionLookup) -> Iterator[Version]:
    """Yield ``version`` and its primary ancestors, newest first.

    Only ``parent_id`` is followed. The walk is bounded by the number of
    Versions in the store; a longer walk means the links form a cycle.

    Raises:
        IntegrityError: On a cycle or a parent id the store does not hold.
    """
    by_id = _as_mapping(versions)
    limit = max(len(by_id), 1)
    current: Version | None = version
    steps = 0
    while current is not None:
        steps += 1
        if steps > limit:
            raise IntegrityError(
                f"Parent chain of {version.id} is longer than the store "
                f"({limit} versions); the parent links form a cycle"
            )
        yield current
        parent_id = current.parent_id
        if parent_id is None:
            return
        parent = by_id.get(parent_id)
        if parent is None:
            raise IntegrityError(
                f"Version {current.id} references missing parent {parent_id}"
            )
        current = parent


def common_ancestor(
    v1: Version, v2: Version, versions: VersionLookup
) -> Version | None:
    """Find the lowest common ancestor of two Versions.

    Collects every id on ``v1``'s primary chain (``v1`` included), then
    walks ``v2``'s chain and returns the first Version found in that
    set. Returns None when the histories are disjoint; callers merge
    against an empty base in that case.
    """
    seen = {v.id for v in walk(v1, versions)}
    for candidate in walk(v2, versions):
        if candidate.id in seen:
            return candidate
    return None


def chain(version: Version, versions: VersionLookup) -> list[Version]:
    """The primary chain from the earliest ancestor to ``version``."""
    result = list(walk(version, versions))
    result.reverse()
    return result
