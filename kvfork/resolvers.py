"""Per-key merge functions for conflicts that have an obvious answer.

A merge function receives ``(base, a, b)``, the decoded values of one
key in the common ancestor and on each side of a merge. Any argument
can be ``MISSING`` (key absent on that side). Returning ``MISSING``
drops the key from the merged document. Raising leaves the key in
conflict.
"""

from __future__ import annotations

from typing import Any, Callable

from .equality import MISSING, values_equal

MergeFn = Callable[[Any, Any, Any], Any]


def prefer_a() -> MergeFn:
    """Always take side A (the source branch in ``Repository.merge``)."""
    return lambda base, a, b: a


def prefer_b() -> MergeFn:
    """Always take side B (the target branch in ``Repository.merge``)."""
    return lambda base, a, b: b


def counter() -> MergeFn:
    """A numeric counter. Merge = a + b - base.

    An absent value counts as 0.
    """

    def merge(base: Any, a: Any, b: Any) -> Any:
        def num(v: Any) -> int | float:
            if v is MISSING:
                return 0
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise TypeError(f"counter merge needs numbers, got {v!r}")
            return v

        return num(a) + num(b) - num(base)

    return merge


def union() -> MergeFn:
    """List union: base order first, then additions from A, then from B.

    Elements removed by either side are dropped.
    """

    def merge(base: Any, a: Any, b: Any) -> Any:
        def items(v: Any) -> list:
            if v is MISSING:
                return []
            if not isinstance(v, list):
                raise TypeError(f"union merge needs lists, got {v!r}")
            return v

        base_items, a_items, b_items = items(base), items(a), items(b)

        def contains(seq: list, item: Any) -> bool:
            return any(values_equal(item, x) for x in seq)

        result: list = []
        for item in base_items + a_items + b_items:
            if contains(result, item):
                continue
            in_base = contains(base_items, item)
            if in_base and not (contains(a_items, item) and contains(b_items, item)):
                continue
            result.append(item)
        return result

    return merge
