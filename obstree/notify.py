"""
Notification Bubbling - Delivering Changes From a Node Up to the Root
=====================================================================

A change is reported at the node where it happened and then at every ancestor
up to the root. Each ancestor receives the same (value, prev_value) pair of
the origin, together with the relative key path leading from itself down to
the origin:

    tree = {"a": {"b": {"c": 1}}}
    set a.b.c = 2

    node    path            levels_up
    a.b.c   []              0
    a.b     ["c"]           1
    a       ["b", "c"]      2
    root    ["a", "b", "c"] 3

Deep listeners fire at every level. Shallow listeners only fire while
``levels_up <= 1``, i.e. for a change at their own node or one level below.
An initial assignment (prev_value is None) starts counting at -1, so it is
also reported to the shallow listeners of the grandparent.

Delivery is synchronous, in registration order, over a snapshot of each
node's listener list. A listener that mutates the tree runs the nested
mutation to completion before delivery continues (depth-first). Exceptions
raised by listeners propagate to the code that performed the mutation.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from .exceptions import NotificationDepthError
from .nodes import PathNode, get_parent, get_value

if TYPE_CHECKING:
    from .tree import ObservableTree

logger = logging.getLogger(__name__)


@dataclass
class ListenerInfo:
    """Details of one change, as seen from the notified node."""

    path: List[Any] = field(default_factory=list)
    prev_value: Any = None
    value: Any = None


ListenerCallback = Callable[[Any, ListenerInfo], None]


class Listener:
    """A callback registered at exactly one node."""

    __slots__ = ("node", "callback", "shallow")

    def __init__(self, node: PathNode, callback: ListenerCallback, shallow: bool):
        self.node = node
        self.callback = callback
        self.shallow = shallow

    def __repr__(self):
        kind = "shallow" if self.shallow else "deep"
        return f"Listener({self.node!r}, {kind})"


def register_listener(
    node: PathNode, callback: ListenerCallback, shallow: bool = False
) -> Listener:
    """Attach a listener to a node. The returned record unregisters it."""
    listener = Listener(node, callback, shallow)
    if node.listeners is None:
        node.listeners = []
    node.listeners.append(listener)
    logger.debug("Registered %r", listener)
    return listener


def unregister(listener: Listener) -> None:
    """Remove a listener. Unregistering twice is harmless."""
    listeners = listener.node.listeners
    if listeners and listener in listeners:
        listeners.remove(listener)


@contextmanager
def _depth_guard(tree: "ObservableTree"):
    limit = tree.config.max_notify_depth
    if limit is not None and tree.notify_depth >= limit:
        raise NotificationDepthError(
            f"Listener-triggered mutations nested deeper than {limit} levels"
        )
    tree.notify_depth += 1
    try:
        yield
    finally:
        tree.notify_depth -= 1


def _notify(node: PathNode, info: ListenerInfo, levels_up: Optional[int]) -> None:
    """Invoke the listeners of a single node that accept this distance."""
    if not node.listeners:
        return
    value = get_value(node)
    for listener in tuple(node.listeners):
        if not listener.shallow or (levels_up is not None and levels_up <= 1):
            listener.callback(value, info)


def _notify_up(node: PathNode, info: ListenerInfo, levels_up: int) -> None:
    while True:
        _notify(node, info, levels_up)
        parent = get_parent(node)
        if parent is None:
            return
        info = ListenerInfo([node.key] + info.path, info.prev_value, info.value)
        node = parent
        levels_up += 1


def notify(node: PathNode, value: Any, prev_value: Any) -> None:
    """Report a change at ``node`` and bubble it up to the root."""
    with _depth_guard(node.tree):
        levels_up = -1 if prev_value is None else 0
        _notify_up(node, ListenerInfo([], prev_value, value), levels_up)


def notify_direct(node: PathNode, value: Any, prev_value: Any) -> None:
    """
    Report a change to the deep listeners of ``node`` only, without bubbling.

    Used when a wholesale replacement changes the value under a node that
    already existed, so listeners below the replaced node still hear about it.
    """
    with _depth_guard(node.tree):
        _notify(node, ListenerInfo([], prev_value, value), None)
