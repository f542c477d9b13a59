"""
Local Persistence - Saving and Restoring Trees as JSON
======================================================

Persistence sits outside the tree and talks to it only through the
collaborator boundary: ``read`` for the snapshot to save, a deep root
listener to learn about changes, and writes through the accessor to load a
stored snapshot, so listeners hear about loaded state like any other change.

Storage backends follow the browser ``localStorage`` model: string values
keyed by table name.

Usage:
    storage = MemoryStorage()
    tree = observable({"todos": []})
    handle = persist_observable(tree, "todos", storage)

    tree.root["todos"].push("buy milk")
    storage.get_item("todos")   # '{"todos": ["buy milk"]}'

    handle.dispose()

Saves are immediate unless a ``save_timeout`` (seconds) is given, in which
case bursts of changes are coalesced into one save on a timer thread. The
snapshot is copied on the thread that made the change; the timer thread only
serializes and writes it.
"""

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import PersistenceError
from .notify import ListenerInfo, register_listener, unregister
from .tree import ObservableTree, read

logger = logging.getLogger(__name__)


# ============================================================================
# Storage backends
# ============================================================================


class LocalStorage:
    """String key/value storage interface."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryStorage(LocalStorage):
    """In-process storage; contents are lost with the object."""

    def __init__(self):
        self.store: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.store.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.store[key] = str(value)

    def remove_item(self, key: str) -> None:
        self.store.pop(key, None)

    def clear(self) -> None:
        self.store.clear()


class FileStorage(LocalStorage):
    """One ``<key>.json`` file per table inside a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def clear(self) -> None:
        for path in self.directory.glob("*.json"):
            path.unlink()


# ============================================================================
# Persistence
# ============================================================================


def remove_null_undefined(value: Any) -> Any:
    """Drop None entries from dicts, recursively, in place. Returns value."""
    if isinstance(value, dict):
        for key in [key for key, item in value.items() if item is None]:
            del value[key]
        for item in value.values():
            remove_null_undefined(item)
    return value


class PersistHandle:
    """Keeps one tree saved to one storage table."""

    def __init__(
        self,
        tree: ObservableTree,
        local: str,
        storage: LocalStorage,
        save_timeout: Optional[float] = None,
    ):
        self.tree = tree
        self.local = local
        self.storage = storage
        self.save_timeout = save_timeout
        self._timer: Optional[threading.Timer] = None
        self._pending: Any = None
        self._lock = threading.Lock()
        self._listener = None

    def load(self) -> bool:
        """
        Apply the stored snapshot to the tree, if there is one.

        Returns:
            True if a snapshot was loaded

        Raises:
            PersistenceError: If the stored data is not JSON of the root's type
        """
        raw = self.storage.get_item(self.local)
        if raw is None:
            return False
        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Stored data for {self.local!r} is not valid JSON") from e

        if type(loaded) is not type(self.tree.value):
            raise PersistenceError(
                f"Stored data for {self.local!r} is a {type(loaded).__name__}, "
                f"but the tree holds a {type(self.tree.value).__name__}"
            )
        self.tree.root.set_value(loaded)
        logger.debug("Loaded %r from storage", self.local)
        return True

    def start(self) -> None:
        if self._listener is None:
            self._listener = register_listener(self.tree.root_node, self._on_change)

    def _snapshot(self) -> Any:
        return remove_null_undefined(copy.deepcopy(read(self.tree)))

    def _write(self, snapshot: Any) -> None:
        self.storage.set_item(self.local, json.dumps(snapshot))

    def _on_change(self, value: Any, info: ListenerInfo) -> None:
        if not self.save_timeout:
            self.save()
            return
        # Copied here, on the mutating thread; the timer only serializes
        snapshot = self._snapshot()
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = snapshot
            self._timer = threading.Timer(self.save_timeout, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            snapshot, self._pending = self._pending, None
            self._timer = None
        if snapshot is not None:
            self._write(snapshot)

    def save(self) -> None:
        """Write the current state to storage."""
        self._write(self._snapshot())

    def _cancel_timer(self) -> bool:
        with self._lock:
            pending = self._pending is not None
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
        return pending

    def flush(self) -> None:
        """Save immediately, replacing any pending debounced save."""
        self._cancel_timer()
        self.save()

    def dispose(self) -> None:
        """Stop persisting. A pending debounced save is written first."""
        if self._cancel_timer():
            self.save()
        if self._listener is not None:
            unregister(self._listener)
            self._listener = None


def persist_observable(
    tree: ObservableTree,
    local: str,
    storage: Optional[LocalStorage] = None,
    save_timeout: Optional[float] = None,
) -> PersistHandle:
    """
    Load ``tree`` from ``storage[local]`` and keep saving it there.

    Args:
        tree: Tree to persist
        local: Storage table name
        storage: Backend to read and write; a fresh MemoryStorage if omitted
        save_timeout: Debounce in seconds; defaults to the configured value

    Returns:
        Handle to flush or stop persistence
    """
    if save_timeout is None:
        save_timeout = tree.config.save_timeout
    if storage is None:
        storage = MemoryStorage()
    handle = PersistHandle(tree, local, storage, save_timeout)
    handle.load()
    handle.start()
    return handle
