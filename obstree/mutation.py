"""
Mutation & Diff Engine - set / assign / delete / push / splice
==============================================================

All writes go through one pipeline:

1. Read the previous value at the target key.
2. Detach every tracked container under the previous value.
3. Store the new value.
4. If the new value is a container, walk it (build_subtree): attach each
   container to its node and, where a node already existed under the old
   structure and its value changed, queue a direct notification for that
   node's deep listeners. Nodes under keys or indices that disappeared are
   queued with value None.
5. Deliver the queued direct notifications, then bubble a notification from
   the target node up to the root.

The whole new subtree is attached before any listener runs, so a listener
that raises leaves the tree consistent with the stored data.

List mutations (push/splice, and delete on a list index) change the list in
place, so anyone holding the list sees the new contents, and then replay as a
replacement of the list by itself against a snapshot of its old contents.
There is no separate list diff.

Equal values are never short-circuited: every write notifies.
"""

from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from .binding import attach, detach, is_primitive
from .exceptions import InvalidKeyError, NotTrackedError
from .nodes import PathNode, get_child, get_node, get_parent, get_value, has_node
from .notify import notify, notify_direct

# (node, value, prev_value) triples waiting for delivery
Pending = List[Tuple[PathNode, Any, Any]]


def check_keys(value: Any) -> None:
    """
    Reject mappings with non-str keys anywhere inside value.

    Raises:
        InvalidKeyError: On the first offending key
    """
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidKeyError(
                    f"Mapping keys must be strings, got {type(key).__name__} key {key!r}"
                )
            check_keys(item)
    elif isinstance(value, list):
        for item in value:
            check_keys(item)


def _differs(a: Any, b: Any) -> bool:
    # Primitives compare by value, containers by identity
    if is_primitive(a) and is_primitive(b):
        return a != b
    return a is not b


def _normalize_index(container: list, key: Any) -> int:
    index = int(key)
    if index < 0:
        index += len(container)
    return index


def _store(container: Union[dict, list], key: Any, value: Any) -> None:
    if isinstance(container, list):
        index = _normalize_index(container, key)
        if index == len(container):
            container.append(value)
        else:
            container[index] = value
    else:
        container[key] = value


def _collect_discarded(
    node: PathNode, prev_value: Any, pending: Pending, keys: Optional[Iterable[Any]] = None
) -> None:
    """Queue None for existing nodes under a discarded container."""
    if isinstance(prev_value, dict):
        is_list = False
        keys = list(prev_value) if keys is None else keys
    elif isinstance(prev_value, list):
        is_list = True
        keys = range(len(prev_value)) if keys is None else keys
    else:
        return

    tree = node.tree
    for key in keys:
        if not has_node(tree, node.path, key):
            continue
        prev_child = prev_value[key]
        child = get_node(tree, node.path, key)
        _collect_discarded(child, prev_child, pending)
        # List items are not diffed themselves, only what lives inside them
        if not is_list and prev_child is not None:
            pending.append((child, None, prev_child))


def _build(parent: PathNode, value: Union[dict, list], prev_value: Any, pending: Pending) -> None:
    tree = parent.tree
    is_list = isinstance(value, list)
    keys = range(len(value)) if is_list else list(value)

    for key in keys:
        child_value = value[key]
        prev_child = get_child(prev_value, key)
        is_container = not is_primitive(child_value)
        exists = has_node(tree, parent.path, key)
        if not (is_container or exists):
            continue

        child = get_node(tree, parent.path, key)
        if is_container:
            _build(child, child_value, prev_child, pending)
        else:
            _collect_discarded(child, prev_child, pending)
        if exists and prev_value is not None and not is_list and _differs(child_value, prev_child):
            pending.append((child, child_value, prev_child))

    if is_list:
        if isinstance(prev_value, list) and len(prev_value) > len(value):
            _collect_discarded(parent, prev_value, pending, range(len(value), len(prev_value)))
    elif isinstance(prev_value, dict):
        removed = [key for key in prev_value if key not in value]
        _collect_discarded(parent, prev_value, pending, removed)

    attach(parent, value)


def _emit(pending: Pending) -> None:
    for node, value, prev_value in pending:
        notify_direct(node, value, prev_value)


def build_subtree(parent: PathNode, value: Union[dict, list], prev_value: Any = None) -> None:
    """
    Attach a container and everything below it, diffing against prev_value.

    Lists are walked by index but never diffed: a list whose length changed
    is treated structurally, not as a key-preserving update. Direct
    notifications are delivered only once the whole subtree is attached.
    """
    pending: Pending = []
    _build(parent, value, prev_value, pending)
    _emit(pending)


def _replace(container: Union[dict, list], key: Any, node: PathNode, value: Any) -> None:
    """Core write: store ``value`` at ``container[key]``, which lives at ``node``."""
    prev_value = get_child(container, key)
    if not is_primitive(prev_value):
        detach(node.tree, prev_value)

    _store(container, key, value)

    pending: Pending = []
    if not is_primitive(value):
        _build(node, value, prev_value, pending)
    else:
        _collect_discarded(node, prev_value, pending)
    _emit(pending)

    notify(node, value, prev_value)


def _container_at(node: PathNode) -> Union[dict, list]:
    container = get_value(node)
    if is_primitive(container):
        raise NotTrackedError(f"No dict or list is stored at {node!r}")
    return container


def set_keyed_value(node: PathNode, key: Any, value: Any) -> None:
    """
    Set ``key`` of the container at ``node`` to ``value``.

    Raises:
        NotTrackedError: If no dict or list is stored at node
        InvalidKeyError: If a mapping key (the target or one inside value)
            is not a str
    """
    container = _container_at(node)
    if isinstance(container, list):
        key = _normalize_index(container, key)
    elif not isinstance(key, str):
        raise InvalidKeyError(f"Mapping keys must be strings, got {type(key).__name__} key {key!r}")
    check_keys(value)
    _replace(container, key, get_node(node.tree, node.path, key), value)


def set_value(node: PathNode, value: Any) -> None:
    """
    Replace the value stored at ``node``.

    The root can not be swapped for another object because callers hold it:
    a dict root is merged with ``value`` via assign, and a list root has its
    contents replaced in place.
    """
    if node.is_root:
        root_value = get_value(node)
        if isinstance(root_value, list):
            splice(node, 0, len(root_value), *value)
        else:
            assign(node, value)
        return
    set_keyed_value(get_parent(node), node.key, value)


def assign(node: PathNode, value: Union[Mapping, list]) -> None:
    """Shallow merge: one independent set per key, in the given key order."""
    items = enumerate(value) if isinstance(value, list) else list(value.items())
    for key, item in items:
        set_keyed_value(node, key, item)


def delete(node: PathNode, key: Any = None) -> None:
    """
    Remove ``key`` from the container at ``node``.

    Without a key the node deletes itself from its parent; on the root that is
    a no-op. For a mapping, listeners are notified as if the key were set to
    None, then the key is removed so it no longer shows up in enumeration. A
    list index is removed with ``splice(index, 1)``, so items after it are
    diffed at their new positions.
    """
    if key is None:
        if node.is_root:
            return
        return delete(get_parent(node), node.key)

    container = _container_at(node)
    if isinstance(container, list):
        index = _normalize_index(container, key)
        if 0 <= index < len(container):
            splice(node, index, 1)
        return

    if key not in container:
        return
    set_keyed_value(node, key, None)
    get_value(node).pop(key, None)


def _mutate_list(node: PathNode, operation: Callable[[list], Any]) -> Any:
    items = get_value(node)
    if not isinstance(items, list):
        raise TypeError(f"{node!r} does not hold a list")

    prev_value = items[:]
    result = operation(items)

    if node.is_root:
        container, key = node.tree.holder, node.tree.config.root_key
    else:
        container, key = get_value(get_parent(node)), node.key

    # Put the snapshot back so the replacement below diffs old against new
    _store(container, key, prev_value)
    _replace(container, key, node, items)
    return result


def push(node: PathNode, *items: Any) -> int:
    """Append items to the list at ``node``; returns the new length."""
    check_keys(list(items))

    def operation(target: list) -> int:
        target.extend(items)
        return len(target)

    return _mutate_list(node, operation)


def splice(
    node: PathNode, start: int, delete_count: Optional[int] = None, *items: Any
) -> List[Any]:
    """
    Remove ``delete_count`` items at ``start`` and insert ``items`` there.

    Negative starts count from the end; a missing delete_count removes
    everything from start on. Returns the removed items.
    """
    check_keys(list(items))

    def operation(target: list) -> List[Any]:
        begin = start + len(target) if start < 0 else start
        begin = max(0, min(begin, len(target)))
        count = len(target) - begin if delete_count is None else max(0, delete_count)
        removed = target[begin : begin + count]
        target[begin : begin + count] = list(items)
        return removed

    return _mutate_list(node, operation)
