"""
Binding Layer - Attaching Tracked Values to Their Nodes
=======================================================

A value becomes part of a tree when it is attached: the tree's arena records
``value -> node`` and hands back an ArenaHandle. The value itself is never
modified, so key enumeration, equality and serialization of user data are
unaffected by tracking.

Detaching is recursive. When a subtree is discarded by replacement or deletion
every container under it releases its arena slot, so identities are neither
leaked nor claimed by unrelated values later stored in the same slot.
"""

import logging
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from .exceptions import PrimitiveValueError

if TYPE_CHECKING:
    from .nodes import PathNode
    from .tree import ObservableTree

logger = logging.getLogger(__name__)


class ArenaHandle(NamedTuple):
    """Stable reference to an attached value inside its tree's arena."""

    handle: int
    generation: int


def is_primitive(value: Any) -> bool:
    """Anything that is not a dict or a list is treated as a primitive."""
    return not isinstance(value, (dict, list))


def attach(node: "PathNode", value: Any) -> ArenaHandle:
    """
    Register a container as the value living at ``node``.

    Attaching an already-tracked value is a no-op that returns its existing
    handle; the value keeps the node it was first attached at. A container
    stored at two paths is therefore tracked once, at its first path, and
    detaching either occurrence releases it for both.

    Raises:
        PrimitiveValueError: If value is not a dict or list
    """
    if is_primitive(value):
        raise PrimitiveValueError(
            f"Cannot attach {type(value).__name__} at {node!r}: only dict and list values can be tracked"
        )

    arena = node.tree.arena
    handle = arena.handle_of(value)
    if handle is None:
        handle, generation = arena.allocate(value, node)
        logger.debug("Attached %s at %r as handle %d", type(value).__name__, node, handle)
        return ArenaHandle(handle, generation)
    return ArenaHandle(handle, arena.generation_of(handle))


def detach(tree: "ObservableTree", value: Any) -> None:
    """Recursively release the arena slots of a container and its children."""
    children = value if isinstance(value, list) else value.values()
    for child in children:
        if not is_primitive(child):
            detach(tree, child)

    handle = tree.arena.handle_of(value)
    if handle is not None:
        tree.arena.free(handle)
        logger.debug("Detached handle %d", handle)


def resolve_node(tree: "ObservableTree", value: Any) -> Optional["PathNode"]:
    """Return the node a value is attached at, or None if it is not tracked."""
    if is_primitive(value):
        return None
    return tree.arena.node_of(value)
