"""
Bound Accessor - Mutation and Listener Surface for Tracked Values
=================================================================

A Bound is the handle a caller uses to change a tracked value and listen to
it. It addresses its node in one of two ways:

- **value-bound**: obtained for a tracked dict or list. It stores the
  (handle, generation) pair of the value's arena slot, so it keeps following
  the value wherever the node registry places it, and it becomes stale once
  the value is discarded by a replacement or deletion.
- **prop-bound**: obtained with ``prop(key)`` or by indexing with a key that
  does not hold a container yet. It addresses the child path directly, even
  before anything exists there.

Basic Usage
-----------

```python
tree = observable({"user": {"name": "Ada"}, "todos": []})
user = tree.root["user"]

dispose = user.on_change(lambda value, info: print(info.path, value))
user.set("name", "Grace")      # prints ['name'] {'name': 'Grace'}
tree.root["todos"].push("write tests")
dispose()
```
"""

from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Tuple, Union

from . import mutation
from .binding import is_primitive
from .exceptions import NotTrackedError
from .nodes import PathNode, get_child, get_node, get_value
from .notify import ListenerCallback, register_listener, unregister
from .on import on_equals, on_has_value, on_true

if TYPE_CHECKING:
    from .tree import ObservableTree


class Bound:
    """Mutation and listener operations pre-bound to one node."""

    __slots__ = ("_tree", "_handle", "_generation", "_prop")

    def __init__(
        self,
        tree: "ObservableTree",
        handle: Optional[int] = None,
        generation: int = 0,
        prop: Optional[Tuple[PathNode, Any]] = None,
    ):
        self._tree = tree
        self._handle = handle
        self._generation = generation
        self._prop = prop

    @classmethod
    def for_value(cls, tree: "ObservableTree", value: Any) -> "Bound":
        """
        Bind to a tracked dict or list.

        Raises:
            NotTrackedError: If value was never attached to this tree
        """
        handle = None if is_primitive(value) else tree.arena.handle_of(value)
        if handle is None:
            raise NotTrackedError(f"{type(value).__name__} value is not tracked by {tree!r}")
        return cls(tree, handle, tree.arena.generation_of(handle))

    @classmethod
    def for_prop(cls, node: PathNode, key: Any) -> "Bound":
        return cls(node.tree, prop=(node, key))

    # ------------------------------------------------------------------
    # Node resolution
    # ------------------------------------------------------------------

    @property
    def node(self) -> PathNode:
        """
        The node this accessor operates on.

        Raises:
            NotTrackedError: If the bound value has been discarded
        """
        if self._prop is not None:
            parent, key = self._prop
            return get_node(self._tree, parent.path, key)
        node = self._tree.arena.lookup(self._handle, self._generation)
        if node is None:
            raise NotTrackedError("Value was removed from its tree; bind to the new value instead")
        return node

    @property
    def tree(self) -> "ObservableTree":
        return self._tree

    @property
    def is_stale(self) -> bool:
        if self._prop is not None:
            return False
        return self._tree.arena.lookup(self._handle, self._generation) is None

    @property
    def value(self) -> Any:
        return get_value(self.node)

    def get(self) -> Any:
        """Explicit getter (alias for value property)."""
        return self.value

    def prop(self, key: Any) -> "Bound":
        """Accessor for a child path, whether or not a value exists there."""
        return Bound.for_prop(self.node, key)

    def __getitem__(self, key: Any) -> "Bound":
        child = get_child(self.value, key)
        if not is_primitive(child) and child in self._tree.arena:
            return Bound.for_value(self._tree, child)
        return self.prop(key)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_value(self, value: Any) -> None:
        """Replace the value this accessor addresses."""
        mutation.set_value(self.node, value)

    def set_keyed_value(self, key: Any, value: Any) -> None:
        """Set one key of the dict or list this accessor addresses."""
        mutation.set_keyed_value(self.node, key, value)

    set = set_keyed_value

    def assign(self, values: Union[Mapping, list]) -> None:
        mutation.assign(self.node, values)

    def delete(self, key: Any = None) -> None:
        """Delete a key, or this value itself from its parent when no key is given."""
        mutation.delete(self.node, key)

    def push(self, *items: Any) -> int:
        return mutation.push(self.node, *items)

    def append(self, item: Any) -> None:
        mutation.push(self.node, item)

    def splice(self, start: int, delete_count: Optional[int] = None, *items: Any) -> List[Any]:
        return mutation.splice(self.node, start, delete_count, *items)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def _listen(self, callback: ListenerCallback, shallow: bool) -> Callable[[], None]:
        listener = register_listener(self.node, callback, shallow)

        def dispose() -> None:
            unregister(listener)

        return dispose

    def on_change(self, callback: ListenerCallback) -> Callable[[], None]:
        """
        Listen to changes at this node or anywhere below it.

        Args:
            callback: Called as ``callback(value, info)``

        Returns:
            Function that removes the listener
        """
        return self._listen(callback, shallow=False)

    def on_change_shallow(self, callback: ListenerCallback) -> Callable[[], None]:
        """Listen to changes at this node or its direct children only."""
        return self._listen(callback, shallow=True)

    def on_equals(self, expected: Any, callback: Callable[[Any], None]) -> Callable[[], None]:
        return on_equals(self.node, expected, callback)

    def on_has_value(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        return on_has_value(self.node, callback)

    def on_true(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        return on_true(self.node, callback)

    def __repr__(self):
        if self.is_stale:
            return "Bound(<stale>)"
        return f"Bound({self.node!r})"
