"""
File-based state store.

One canonical JSON document per namespace:
    <root>/<namespace>.json -> {"<key>": {...}, ...}

Writes go through a temp file, fsync and os.replace while holding an
exclusive lock on <root>/<namespace>.lock, so readers never observe a
half-written document.
"""

import json
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from ..core.canonical import canonical_json_str
from ..core.errors import StateStoreError
from .store import StateStore

try:
    import fcntl
except ImportError:  # Windows or unsupported platform
    fcntl = None


class FileStateStore(StateStore):
    """
    File-backed namespaced key-value store.

    Guarantees:
    - Atomic replacement of a namespace document
    - Fsync after each write (durability)
    - Exclusive lock around every read-modify-write
    """

    def __init__(self, root: str) -> None:
        """
        Initialize file state store.

        Args:
            root: Directory holding the namespace documents
        """
        self.root = root
        os.makedirs(root, exist_ok=True)

    def _path(self, namespace: str) -> str:
        if not namespace or "/" in namespace or namespace.startswith("."):
            raise StateStoreError(f"invalid namespace: {namespace!r}")
        return os.path.join(self.root, f"{namespace}.json")

    @contextmanager
    def _locked(self, namespace: str) -> Iterator[None]:
        lock_path = os.path.join(self.root, f"{namespace}.lock")
        try:
            lock = open(lock_path, "a+b")
        except OSError as ex:
            raise StateStoreError(f"cannot lock namespace {namespace}: {ex}") from ex
        with lock:
            if fcntl:
                fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                if fcntl:
                    fcntl.flock(lock.fileno(), fcntl.LOCK_UN)

    def _read(self, namespace: str) -> Dict[str, Dict[str, Any]]:
        path = self._path(namespace)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as ex:
            raise StateStoreError(str(ex)) from ex
        except UnicodeDecodeError as ex:
            raise StateStoreError(f"corrupt state file {path}: {ex}") from ex
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except ValueError as ex:
            raise StateStoreError(f"corrupt state file {path}: {ex}") from ex
        if not isinstance(data, dict):
            raise StateStoreError(f"corrupt state file {path}: expected an object")
        return data

    def _write(self, namespace: str, data: Dict[str, Dict[str, Any]]) -> None:
        path = self._path(namespace)
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(canonical_json_str(data))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as ex:
            raise StateStoreError(str(ex)) from ex

    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        return self._read(namespace).get(key)

    def set(self, namespace: str, key: str, value: Dict[str, Any]) -> None:
        with self._locked(namespace):
            data = self._read(namespace)
            # round-trip detaches the stored value from the caller's object
            data[key] = json.loads(canonical_json_str(value))
            self._write(namespace, data)

    def delete(self, namespace: str, key: str) -> None:
        with self._locked(namespace):
            data = self._read(namespace)
            if key in data:
                del data[key]
                self._write(namespace, data)

    def keys(self, namespace: str) -> List[str]:
        return sorted(self._read(namespace).keys())

    def list(self, namespace: str) -> List[Dict[str, Any]]:
        data = self._read(namespace)
        return [data[k] for k in sorted(data.keys())]

    def clear(self, namespace: str) -> None:
        with self._locked(namespace):
            self._write(namespace, {})

    def namespaces(self) -> List[str]:
        found = []
        for name in sorted(os.listdir(self.root)):
            if not name.endswith(".json"):
                continue
            namespace = name[: -len(".json")]
            if self._read(namespace):
                found.append(namespace)
        return found
