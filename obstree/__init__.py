"""
obstree - Observable Path Trees
===============================

Granular change notifications for plain nested dicts and lists, without
wrapping values in proxies. Whole sub-objects can be replaced without losing
listeners registered deeper in the tree.
"""

from .accessor import Bound
from .binding import ArenaHandle, attach, detach, is_primitive, resolve_node
from .config import (
    ObservableConfiguration,
    _reset_configuration,
    configure_observable,
    get_configuration,
)
from .exceptions import (
    InvalidKeyError,
    NotificationDepthError,
    NotTrackedError,
    ObservableError,
    PersistenceError,
    PrimitiveValueError,
)
from .mutation import assign, delete, push, set_keyed_value, set_value, splice
from .nodes import PathNode, get_node, get_parent, get_value, join_path, split_path
from .notify import Listener, ListenerInfo, notify, register_listener, unregister
from .on import on_equals, on_has_value, on_true
from .persist import (
    FileStorage,
    LocalStorage,
    MemoryStorage,
    PersistHandle,
    persist_observable,
)
from .tree import ObservableTree, observable, read, write

__version__ = "0.1.0"

__all__ = [
    # Trees and accessors
    "ObservableTree",
    "Bound",
    "observable",
    # Collaborator boundary
    "read",
    "write",
    "register_listener",
    "unregister",
    # Engine
    "PathNode",
    "get_node",
    "get_parent",
    "get_value",
    "join_path",
    "split_path",
    "ArenaHandle",
    "attach",
    "detach",
    "is_primitive",
    "resolve_node",
    "set_value",
    "set_keyed_value",
    "assign",
    "delete",
    "push",
    "splice",
    "notify",
    "Listener",
    "ListenerInfo",
    # Listener helpers
    "on_equals",
    "on_has_value",
    "on_true",
    # Persistence
    "LocalStorage",
    "MemoryStorage",
    "FileStorage",
    "PersistHandle",
    "persist_observable",
    # Configuration
    "ObservableConfiguration",
    "configure_observable",
    "get_configuration",
    "_reset_configuration",
    # Exceptions
    "ObservableError",
    "PrimitiveValueError",
    "InvalidKeyError",
    "NotTrackedError",
    "NotificationDepthError",
    "PersistenceError",
]
