"""
In-memory state store.

Used by tests and by hosts that embed the core without touching disk.
"""

import copy
from typing import Any, Dict, List, Optional

from .store import StateStore


class MemoryStateStore(StateStore):

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(namespace, {}).get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, namespace: str, key: str, value: Dict[str, Any]) -> None:
        self._data.setdefault(namespace, {})[key] = copy.deepcopy(value)

    def delete(self, namespace: str, key: str) -> None:
        self._data.get(namespace, {}).pop(key, None)

    def keys(self, namespace: str) -> List[str]:
        return sorted(self._data.get(namespace, {}).keys())

    def clear(self, namespace: str) -> None:
        self._data.pop(namespace, None)

    def namespaces(self) -> List[str]:
        return sorted(ns for ns, values in self._data.items() if values)
