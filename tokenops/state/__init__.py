"""
Namespaced key-value persistence.

- StateStore: abstract interface (get/set/list/delete)
- MemoryStateStore: in-process dict store
- FileStateStore: one locked, atomically replaced JSON file per namespace
"""

from .store import StateStore
from .memory_store import MemoryStateStore
from .file_store import FileStateStore

__all__ = [
    "StateStore",
    "MemoryStateStore",
    "FileStateStore",
]
