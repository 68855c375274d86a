"""KV store backends."""

from .base import KVStore
from .disk import Disk
from .memory import Memory
from .namespaced import Namespaced

__all__ = ["Disk", "KVStore", "Memory", "Namespaced"]
