"""Field-level diff between two documents."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .equality import documents_equal, values_equal
from .version import Version

Document = Union[Version, Mapping[str, Any]]


@dataclass(frozen=True)
class Change:
    """A key present on both sides with different values."""

    before: Any
    after: Any


@dataclass(frozen=True)
class DiffResult:
    """Key-level differences going from one document to another.

    Values are reported whole; a change anywhere inside a value gives
    one ``modified`` entry carrying the full old and new value.
    """

    added: dict[str, Any] = field(default_factory=dict)
    removed: dict[str, Any] = field(default_factory=dict)
    modified: dict[str, Change] = field(default_factory=dict)
    unchanged: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when nothing was added, removed or modified."""
        return not (self.added or self.removed or self.modified)

    @property
    def changed_keys(self) -> frozenset[str]:
        return frozenset(self.added) | frozenset(self.removed) | frozenset(self.modified)

    def __bool__(self) -> bool:
        return not self.is_empty


def document_data(doc: Document | None) -> Mapping[str, Any]:
    if doc is None:
        return {}
    if isinstance(doc, Version):
        return doc.data
    return doc


def diff(v1: Document, v2: Document) -> DiffResult:
    """Compare ``v1`` (before) with ``v2`` (after).

    Accepts Versions or plain mappings.
    """
    data1 = document_data(v1)
    data2 = document_data(v2)

    added: dict[str, Any] = {}
    removed: dict[str, Any] = {}
    modified: dict[str, Change] = {}
    unchanged: dict[str, Any] = {}

    for key in data1:
        if key not in data2:
            removed[key] = data1[key]
        elif values_equal(data1[key], data2[key]):
            unchanged[key] = data1[key]
        else:
            modified[key] = Change(before=data1[key], after=data2[key])
    for key in data2:
        if key not in data1:
            added[key] = data2[key]

    return DiffResult(
        added=added, removed=removed, modified=modified, unchanged=unchanged
    )


def has_changes(data: Mapping[str, Any], version: Version | None) -> bool:
    """Whether working data differs from a Version.

    With no Version (a branch without commits), any key counts as a
    change.
    """
    if version is None:
        return len(data) > 0
    return not documents_equal(data, version.data)
