"""kvfork error types."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .merge import Conflict


class KVForkError(Exception):
    """Base class for every error raised by kvfork."""


class ValidationError(KVForkError):
    """Raised when a request is malformed or not allowed in the current state.

    Examples: an empty commit message, a malformed or duplicate branch
    name, deleting ``main`` or the active branch. Never retried.
    """


class NotFoundError(ValidationError, KeyError):
    """Raised when a branch or Version id does not resolve.

    Attributes:
        kind: ``"branch"`` or ``"version"``.
        ident: The name or id that was looked up.
    """

    def __init__(self, kind: str, ident: str | None) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"Unknown {kind}: {ident!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class IntegrityError(KVForkError):
    """Raised when the snapshot store is corrupted.

    A cycle in the parent links, or a parent id that points at a
    Version the store no longer holds. The operation that hit it is
    aborted before anything is written.
    """


class MergeConflict(KVForkError):
    """Raised on request when a three-way merge left conflicts behind.

    A merge with conflicts is normally returned as a result with
    ``success=False``; ``MergeResult.raise_for_conflicts()`` turns it
    into this exception.

    Attributes:
        conflicts: The unresolved conflicts.
        conflicting_keys: Their keys.
    """

    def __init__(self, conflicts: Sequence[Conflict]) -> None:
        self.conflicts = tuple(conflicts)
        self.conflicting_keys = {c.key for c in self.conflicts}
        keys_str = ", ".join(sorted(self.conflicting_keys))
        super().__init__(f"Merge conflict on keys: {keys_str}")
