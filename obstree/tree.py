"""
Observable Tree - Plain Nested Data With Granular Change Notifications
======================================================================

An ObservableTree owns a plain dict or list and everything reachable from it.
The data stays plain: no proxies, no wrapper types, no hidden attributes.
Tracking lives beside the data, in the tree's node registry and arena.

Basic Usage
-----------

```python
from obstree import observable

tree = observable({"settings": {"theme": "light"}, "todos": []})

def on_settings(value, info):
    print(f"settings changed at {info.path}: {info.prev_value} -> {info.value}")

tree.root["settings"].on_change(on_settings)

tree.root["settings"].set("theme", "dark")
# settings changed at ['theme']: light -> dark

tree.root.set("settings", {"theme": "solarized"})
# settings changed at []: {'theme': 'dark'} -> {'theme': 'solarized'}
```

Listeners registered below a replaced value survive the replacement and are
told about the values that changed underneath them.

Collaborator Boundary
---------------------

Code built on top of the tree (persistence, derived values) needs only:

- ``read(tree, path)`` to read a value by path
- ``register_listener(node, callback, shallow)`` / ``unregister(listener)``
- ``write(node, key, value)`` to write through the same pipeline as users
"""

import logging
from typing import Any, Iterable, Optional, Union

from cachetools import LRUCache

from .accessor import Bound
from .binding import is_primitive, resolve_node
from .config import ObservableConfiguration, get_configuration
from .exceptions import PrimitiveValueError
from .mutation import build_subtree, check_keys, set_keyed_value
from .nodes import PathNode, get_child, get_node, get_value_at_path, split_path
from .util.arena import HandleArena

logger = logging.getLogger(__name__)

PathLike = Union[str, Iterable[Any]]


class ObservableTree:
    """
    Root wrapper owning one tracked value, its node registry and its arena.

    Attributes:
        config: Configuration captured at creation time
        holder: ``{root_key: root_value}``; every path is resolved from here
        nodes: Canonical path -> PathNode registry
        arena: Identity side table for tracked containers
        notify_depth: Current nesting of notification cycles
    """

    def __init__(self, value: Union[dict, list], config: Optional[ObservableConfiguration] = None):
        if is_primitive(value):
            raise PrimitiveValueError(
                f"observable() needs a dict or list, got {type(value).__name__}"
            )
        check_keys(value)
        self.config = config or get_configuration()
        self.holder = {self.config.root_key: value}
        self.nodes = {}
        self.arena: HandleArena[PathNode] = HandleArena()
        self.notify_depth = 0
        self._segment_cache = LRUCache(maxsize=self.config.path_cache_size)

        self.root_node = get_node(self, self.config.root_key)
        build_subtree(self.root_node, value)
        self.root = Bound.for_value(self, value)
        logger.debug("Created tree with %d tracked containers", self.arena.live)

    @property
    def value(self) -> Union[dict, list]:
        """The root value. Always the object the tree was created with."""
        return self.holder[self.config.root_key]

    def segments(self, path: str) -> tuple:
        """Split an absolute path, caching the result."""
        try:
            return self._segment_cache[path]
        except KeyError:
            pass
        segments = tuple(split_path(path, self.config.delimiter))
        self._segment_cache[path] = segments
        return segments

    def _absolute(self, path: PathLike) -> str:
        delimiter = self.config.delimiter
        if isinstance(path, str):
            return self.config.root_key + delimiter + path if path else self.config.root_key
        keys = [str(key) for key in path]
        return delimiter.join([self.config.root_key] + keys)

    def node(self, *keys: Any) -> PathNode:
        """Canonical node for a key sequence relative to the root."""
        node = self.root_node
        for key in keys:
            node = get_node(self, node.path, key)
        return node

    def read(self, path: PathLike = "") -> Any:
        """
        Resolve the current value at a path relative to the root.

        Args:
            path: Delimiter-joined string, or a sequence of keys

        Returns:
            The value, or None if any segment is missing
        """
        return get_value_at_path(self, self._absolute(path))

    def bind(self, value: Union[dict, list]) -> Bound:
        """Accessor for a tracked dict or list reachable from the root."""
        return Bound.for_value(self, value)

    def at(self, *keys: Any) -> Bound:
        """
        Accessor for a key sequence relative to the root.

        Returns a value-bound accessor when a tracked container lives there,
        otherwise one addressing the path itself.
        """
        if not keys:
            return self.root
        parent = self.node(*keys[:-1])
        value = get_child(self.read(keys[:-1]), keys[-1])
        if resolve_node(self, value) is not None:
            return Bound.for_value(self, value)
        return Bound.for_prop(parent, keys[-1])

    def __repr__(self):
        return f"ObservableTree({type(self.value).__name__}, nodes={len(self.nodes)})"


def observable(value: Union[dict, list], config: Optional[ObservableConfiguration] = None) -> ObservableTree:
    """
    Start tracking a dict or list.

    Raises:
        PrimitiveValueError: If value is not a dict or list
        InvalidKeyError: If a mapping inside value has a non-str key
    """
    return ObservableTree(value, config)


def read(tree: ObservableTree, path: PathLike = "") -> Any:
    """Current value at a path relative to the root of ``tree``."""
    return tree.read(path)


def write(node: PathNode, key: Any, value: Any) -> None:
    """Write through the full diff/notify pipeline, exactly like a user set."""
    set_keyed_value(node, key, value)
