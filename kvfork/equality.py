"""Whole-value structural equality for document values."""

import copy
from typing import Any, Mapping


class _Missing:
    """Marker for a key that is absent from a document."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Missing, ())


MISSING: Any = _Missing()
"""An absent key. Distinct from ``None``, which is a JSON ``null`` value."""


def values_equal(a: Any, b: Any) -> bool:
    """Deep equality over JSON-like values.

    Dicts compare by key set and values, lists and tuples element-wise.
    ``True`` never equals ``1`` here, unlike plain ``==``.
    """
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (Mapping, list, tuple)) or isinstance(b, (Mapping, list, tuple)):
        return False
    return a == b


def lookup(data: Mapping[str, Any], key: str) -> Any:
    """``data[key]``, or ``MISSING`` when absent."""
    return data[key] if key in data else MISSING


def documents_equal(a: Mapping[str, Any], b: Mapping[str, Any]) -> bool:
    """Whether two documents have the same keys with equal values."""
    return values_equal(dict(a), dict(b))


def deep_copy(data: Mapping[str, Any]) -> dict[str, Any]:
    """An independent copy of a document."""
    return copy.deepcopy(dict(data))
