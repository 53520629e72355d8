"""
StateStore abstract interface.

Generic namespaced key-value persistence. Values are JSON-compatible dicts.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StateStore(ABC):
    """
    Abstract namespaced key-value store.

    All implementations must guarantee:
    - Namespaces are isolated from each other
    - set() stores a copy (later mutation by the caller is not persisted)
    - get() returns a copy (mutating it does not change the store)
    """

    @abstractmethod
    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        """
        Get value stored under key.

        Returns:
            Stored value or None if absent
        """
        ...

    @abstractmethod
    def set(self, namespace: str, key: str, value: Dict[str, Any]) -> None:
        """
        Store value under key, replacing any previous value.

        Raises:
            StateStoreError: If persistence fails
        """
        ...

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        """Delete key. Deleting an absent key is a no-op."""
        ...

    @abstractmethod
    def keys(self, namespace: str) -> List[str]:
        """Keys of namespace in sorted order."""
        ...

    @abstractmethod
    def clear(self, namespace: str) -> None:
        """Remove every key of namespace."""
        ...

    @abstractmethod
    def namespaces(self) -> List[str]:
        """Namespaces that currently hold at least one key."""
        ...

    def list(self, namespace: str) -> List[Dict[str, Any]]:
        """
        All values of namespace, in key order.

        Implementations may override for efficiency.
        """
        values = []
        for key in self.keys(namespace):
            value = self.get(namespace, key)
            if value is not None:
                values.append(value)
        return values

    def has(self, namespace: str, key: str) -> bool:
        return self.get(namespace, key) is not None
