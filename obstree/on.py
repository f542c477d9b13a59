"""
Listener Helpers - One-Shot Listeners Gated on the Node's Value
===============================================================

Built on top of deep listeners. Each helper calls ``callback(value)`` once:
immediately if the condition already holds, otherwise on the first change
after which it holds. The returned callable cancels a pending helper.
"""

from typing import Any, Callable

from .nodes import PathNode, get_value
from .notify import ListenerInfo, register_listener, unregister


def _noop() -> None:
    pass


def on_condition(
    node: PathNode, predicate: Callable[[Any], bool], callback: Callable[[Any], None]
) -> Callable[[], None]:
    """Call ``callback`` once ``predicate`` accepts the value at ``node``."""
    value = get_value(node)
    if predicate(value):
        callback(value)
        return _noop

    def on_change(value: Any, info: ListenerInfo) -> None:
        if predicate(value):
            unregister(listener)
            callback(value)

    listener = register_listener(node, on_change)

    def dispose() -> None:
        unregister(listener)

    return dispose


def on_equals(node: PathNode, expected: Any, callback: Callable[[Any], None]) -> Callable[[], None]:
    return on_condition(node, lambda value: value == expected, callback)


def on_has_value(node: PathNode, callback: Callable[[Any], None]) -> Callable[[], None]:
    return on_condition(node, lambda value: value is not None, callback)


def on_true(node: PathNode, callback: Callable[[Any], None]) -> Callable[[], None]:
    return on_condition(node, bool, callback)
