"""Version and Branch records."""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from .equality import deep_copy

BRANCH_NAME = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")
MAIN_BRANCH = "main"
DEFAULT_AUTHOR = "User"


@dataclass(frozen=True, init=False)
class Version:
    """An immutable snapshot of the document.

    ``parent_id`` is the primary parent; ``merge_parent_id`` is only set
    on merge-commits and points at the head of the branch that was
    merged in.

    The document is copied in on construction and ``data`` hands out a
    fresh deep copy on every access, so nothing a caller does to it
    reaches the stored snapshot.
    """

    id: str
    parent_id: str | None
    message: str
    author: str = DEFAULT_AUTHOR
    timestamp: float = 0.0
    merge_parent_id: str | None = None
    _data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __init__(
        self,
        id: str,
        parent_id: str | None,
        data: Mapping[str, Any],
        message: str,
        author: str = DEFAULT_AUTHOR,
        timestamp: float = 0.0,
        merge_parent_id: str | None = None,
    ) -> None:
        object.__setattr__(self, "id", id)
        object.__setattr__(self, "parent_id", parent_id)
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "author", author)
        object.__setattr__(self, "timestamp", timestamp)
        object.__setattr__(self, "merge_parent_id", merge_parent_id)
        object.__setattr__(self, "_data", deep_copy(data))

    @property
    def data(self) -> dict[str, Any]:
        """A deep copy of the snapshot."""
        return deep_copy(self._data)

    @property
    def is_merge(self) -> bool:
        return self.merge_parent_id is not None

    @property
    def parents(self) -> tuple[str, ...]:
        """Parent ids, primary first."""
        return tuple(p for p in (self.parent_id, self.merge_parent_id) if p)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "merge_parent_id": self.merge_parent_id,
            "data": self.data,
            "message": self.message,
            "author": self.author,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Version":
        return cls(
            id=record["id"],
            parent_id=record.get("parent_id"),
            merge_parent_id=record.get("merge_parent_id"),
            data=dict(record.get("data") or {}),
            message=record["message"],
            author=record.get("author", DEFAULT_AUTHOR),
            timestamp=float(record.get("timestamp", 0.0)),
        )


@dataclass(frozen=True)
class Branch:
    """A named pointer to a Version. ``head=None`` means no commits yet."""

    name: str
    head: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.head is None


def is_valid_branch_name(name: str) -> bool:
    return isinstance(name, str) and BRANCH_NAME.fullmatch(name) is not None
