"""Three-way merge of flat documents."""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .diff import Document, document_data
from .equality import MISSING, deep_copy, lookup, values_equal
from .errors import MergeConflict, ValidationError
from .resolvers import MergeFn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    """A key both sides changed to different values.

    Any of the three values may be ``MISSING`` (key absent there).
    """

    key: str
    base_value: Any
    value_a: Any
    value_b: Any


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a three-way merge.

    ``merged_data`` holds every auto-resolved key; conflicting keys are
    left out of it until ``resolve()`` supplies values for them.
    """

    success: bool
    merged_data: dict[str, Any]
    conflicts: tuple[Conflict, ...] = ()
    auto_merged_keys: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.success

    @property
    def conflicting_keys(self) -> frozenset[str]:
        return frozenset(c.key for c in self.conflicts)

    def raise_for_conflicts(self) -> None:
        """Raise ``MergeConflict`` if the merge left conflicts."""
        if self.conflicts:
            raise MergeConflict(self.conflicts)

    def resolve(self, resolutions: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Overlay chosen values for the conflicting keys.

        Args:
            resolutions: key -> chosen value. ``MISSING`` drops the key.

        Returns:
            The complete merged document, ready for a merge-commit.

        Raises:
            ValidationError: If a conflicting key has no resolution, or
                a resolution names a key that is not in conflict.
        """
        resolutions = dict(resolutions or {})
        unresolved = self.conflicting_keys - resolutions.keys()
        if unresolved:
            raise ValidationError(
                "Unresolved conflicts on keys: " + ", ".join(sorted(unresolved))
            )
        unexpected = resolutions.keys() - self.conflicting_keys
        if unexpected:
            raise ValidationError(
                "Not in conflict: " + ", ".join(sorted(unexpected))
            )

        merged = deep_copy(self.merged_data)
        for key, value in resolutions.items():
            if value is MISSING:
                merged.pop(key, None)
            else:
                merged[key] = copy.deepcopy(value)
        return merged


def three_way_merge(
    base: Document | None,
    side_a: Document,
    side_b: Document,
    *,
    merge_fns: Mapping[str, MergeFn] | None = None,
    default_merge: MergeFn | None = None,
) -> MergeResult:
    """Merge two documents against their common ancestor.

    A side "changed" a key when its value differs from the base value
    under deep equality, absence counting as its own value. Keys only
    one side changed take that side's value (or are dropped if that
    side deleted them). Keys both sides changed to the same value take
    it. Anything else is a conflict, unless a merge function for the
    key produces a value.

    Args:
        base: Common ancestor. None means no shared history; every key
            then counts as added independently on each side.
        side_a: First side (the source branch in ``Repository.merge``).
        side_b: Second side (the target branch).
        merge_fns: Per-key merge functions tried on conflicts.
        default_merge: Merge function for conflicting keys without a
            per-key one.
    """
    base_data = document_data(base)
    data_a = document_data(side_a)
    data_b = document_data(side_b)
    merge_fns = merge_fns or {}

    merged: dict[str, Any] = {}
    conflicts: list[Conflict] = []
    auto_merged: list[str] = []

    all_keys = list(dict.fromkeys([*base_data, *data_a, *data_b]))
    for key in all_keys:
        base_val = lookup(base_data, key)
        val_a = lookup(data_a, key)
        val_b = lookup(data_b, key)

        changed_a = not values_equal(val_a, base_val)
        changed_b = not values_equal(val_b, base_val)

        if not changed_a and not changed_b:
            value = base_val
        elif changed_a and not changed_b:
            value = val_a
        elif changed_b and not changed_a:
            value = val_b
        elif values_equal(val_a, val_b):
            value = val_a
        else:
            fn = merge_fns.get(key, default_merge)
            value = MISSING
            resolved = False
            if fn is not None:
                try:
                    value = fn(base_val, val_a, val_b)
                    resolved = True
                except Exception as exc:
                    logger.debug("Merge function for %r failed: %s", key, exc)
            if not resolved:
                conflicts.append(
                    Conflict(key=key, base_value=base_val, value_a=val_a, value_b=val_b)
                )
                continue
            auto_merged.append(key)

        if value is not MISSING:
            merged[key] = copy.deepcopy(value)

    return MergeResult(
        success=not conflicts,
        merged_data=merged,
        conflicts=tuple(conflicts),
        auto_merged_keys=tuple(auto_merged),
    )
