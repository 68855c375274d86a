"""WorkingData: the mutable, uncommitted document."""

from collections.abc import Iterator, MutableMapping
from typing import Any, Mapping

from .diff import DiffResult, diff, has_changes
from .equality import deep_copy
from .version import Version


class WorkingData(MutableMapping[str, Any]):
    """Edit buffer for the active branch.

    Edits are plain mapping operations. Nothing here touches the
    snapshot store; ``Repository.commit()`` turns the buffer into a
    Version. ``replace()`` swaps in a deep copy of another document,
    which is how branch switches and rollbacks reset it.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = deep_copy(data or {})

    # -- Mapping --

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Document keys must be str, not {type(key).__name__}")
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"WorkingData({self._data!r})"

    # -- Buffer operations --

    def replace(self, data: Mapping[str, Any] | None) -> None:
        """Discard the buffer and load a deep copy of ``data``."""
        self._data = deep_copy(data or {})

    def snapshot(self) -> dict[str, Any]:
        """A deep copy of the current buffer."""
        return deep_copy(self._data)

    def has_changes(self, head: Version | None) -> bool:
        """Whether committing against ``head`` would record anything."""
        return has_changes(self._data, head)

    def changes(self, head: Version | None) -> DiffResult:
        """What a commit against ``head`` would record."""
        return diff(head.data if head is not None else {}, self._data)
