"""Snapshot store: an append-only arena of immutable Versions."""

import logging
import time
import uuid
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping

from . import ancestry
from .errors import NotFoundError, ValidationError
from .version import DEFAULT_AUTHOR, Version

logger = logging.getLogger(__name__)

# Smallest step between two timestamps issued by the same store
TICK = 1e-6


class SnapshotStore:
    """Versions indexed by id, kept in creation order.

    Ids are only ever issued here, so parent links always point at
    Versions that existed when the child was created. Nothing is
    mutated after creation; ``delete()`` exists for hard rollback.

    Args:
        versions: Versions to start with (e.g. loaded from persistence).
            Taken as-is, in the given order.
        clock: Returns the current time in epoch seconds. Timestamps
            handed to new Versions are forced strictly increasing.
    """

    def __init__(
        self,
        versions: Iterable[Version] = (),
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._clock = clock or time.time
        self._versions: dict[str, Version] = {}
        self._last_timestamp = float("-inf")
        self.load(versions)

    @property
    def by_id(self) -> Mapping[str, Version]:
        """Read-only id -> Version view."""
        return MappingProxyType(self._versions)

    def load(self, versions: Iterable[Version]) -> None:
        """Add already-created Versions without validating them."""
        for version in versions:
            self._versions[version.id] = version
            self._last_timestamp = max(self._last_timestamp, version.timestamp)

    def _next_timestamp(self) -> float:
        now = float(self._clock())
        if now <= self._last_timestamp:
            now = self._last_timestamp + TICK
        return now

    def _check_parent(self, parent_id: str | None) -> None:
        if parent_id is not None and parent_id not in self._versions:
            raise NotFoundError("version", parent_id)

    def build(
        self,
        data: Mapping[str, Any],
        parent_id: str | None,
        message: str,
        author: str = DEFAULT_AUTHOR,
        merge_parent_id: str | None = None,
    ) -> Version:
        """Validate and construct a Version without adding it.

        ``Repository`` uses this to persist first and append after.
        """
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Commit message is required")
        self._check_parent(parent_id)
        self._check_parent(merge_parent_id)
        return Version(
            id=uuid.uuid4().hex,
            parent_id=parent_id,
            merge_parent_id=merge_parent_id,
            data=data,
            message=message.strip(),
            author=author or DEFAULT_AUTHOR,
            timestamp=self._next_timestamp(),
        )

    def append(self, version: Version) -> Version:
        """Add a Version produced by ``build()``."""
        self._versions[version.id] = version
        self._last_timestamp = max(self._last_timestamp, version.timestamp)
        logger.debug(
            "Created version %s (parent=%s, merge_parent=%s)",
            version.id,
            version.parent_id,
            version.merge_parent_id,
        )
        return version

    def create(
        self,
        data: Mapping[str, Any],
        parent_id: str | None,
        message: str,
        author: str = DEFAULT_AUTHOR,
        merge_parent_id: str | None = None,
    ) -> Version:
        """Create and append a new Version.

        Raises:
            ValidationError: If ``message`` is empty or whitespace.
            NotFoundError: If a non-null parent id does not resolve.
        """
        return self.append(
            self.build(data, parent_id, message, author, merge_parent_id)
        )

    def get(self, version_id: str) -> Version:
        """Look up a Version. Raises NotFoundError if absent."""
        try:
            return self._versions[version_id]
        except KeyError:
            raise NotFoundError("version", version_id) from None

    def find(self, version_id: str | None) -> Version | None:
        """Look up a Version, returning None if absent."""
        if version_id is None:
            return None
        return self._versions.get(version_id)

    def chain(self, version_id: str) -> list[Version]:
        """Primary-parent chain from the earliest ancestor to ``version_id``.

        The ``merge_parent_id`` side of a merge-commit is not followed;
        combine chains of both parents for full history.
        """
        return ancestry.chain(self.get(version_id), self)

    def delete(self, version_id: str) -> None:
        """Remove a Version for good. Raises NotFoundError if absent."""
        if version_id not in self._versions:
            raise NotFoundError("version", version_id)
        del self._versions[version_id]

    def versions(self) -> list[Version]:
        """All Versions in creation order."""
        return list(self._versions.values())

    def newer_than(self, timestamp: float) -> list[Version]:
        """Versions whose timestamp is strictly greater than ``timestamp``."""
        return [v for v in self._versions.values() if v.timestamp > timestamp]

    def copy(self) -> "SnapshotStore":
        """A shallow copy sharing the (immutable) Versions."""
        return SnapshotStore(self._versions.values(), clock=self._clock)

    def to_records(self) -> list[dict[str, Any]]:
        return [v.to_record() for v in self._versions.values()]

    def __contains__(self, version_id: object) -> bool:
        return version_id in self._versions

    def __iter__(self) -> Iterator[Version]:
        return iter(list(self._versions.values()))

    def __len__(self) -> int:
        return len(self._versions)
