"""
Path Identity Registry - Canonical Nodes for Tree Locations
===========================================================

Every addressable location inside an observable tree is represented by exactly
one PathNode, keyed by its canonical path string. Paths are built by joining
keys with the tree's delimiter, starting from the root key:

    "_"                 -> the root value
    "_\\uFEFFtodos"      -> root["todos"]
    "_\\uFEFFtodos\\uFEFF0" -> root["todos"][0]

Nodes are created lazily, on first structural traversal or first listener
registration, and are never removed. A node whose location no longer exists
simply resolves to None.

Functions here only rely on three attributes of the owning tree:
``nodes`` (path -> PathNode), ``holder`` (mapping of root key to root value)
and ``segments(path)`` (cached path splitting).
"""

import logging
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Tuple

if TYPE_CHECKING:
    from .notify import Listener
    from .tree import ObservableTree

logger = logging.getLogger(__name__)


class PathNode:
    """
    Identity of one location in one observable tree.

    Attributes:
        tree: Owning ObservableTree (shared, never copied)
        path: Canonical path string
        parent: Canonical path of the parent node, None for the root
        key: Last path segment, None for the root
        listeners: Registered listeners, None until the first registration
    """

    __slots__ = ("tree", "path", "parent", "key", "listeners")

    def __init__(
        self,
        tree: "ObservableTree",
        path: str,
        parent: Optional[str] = None,
        key: Any = None,
    ):
        self.tree = tree
        self.path = path
        self.parent = parent
        self.key = key
        self.listeners: Optional[List["Listener"]] = None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def __repr__(self):
        readable = self.path.replace(self.tree.config.delimiter, ".")
        return f"PathNode({readable!r})"


def _child_path(tree: "ObservableTree", parent_path: str, key: Any) -> str:
    return parent_path + tree.config.delimiter + str(key)


def _split_last(tree: "ObservableTree", path: str) -> Tuple[Optional[str], Any]:
    """Recover (parent, key) for a node materialized from a bare path."""
    delimiter = tree.config.delimiter
    if delimiter not in path:
        return None, None
    parent, _, key = path.rpartition(delimiter)
    return parent, key


def get_node(tree: "ObservableTree", parent_path: str, key: Any = None) -> PathNode:
    """
    Return the canonical node for the given coordinates, creating it if absent.

    Args:
        tree: Owning tree
        parent_path: Canonical path of the parent, or of the node itself
            when key is omitted
        key: Child key below parent_path

    Returns:
        The single PathNode registered for the resulting path
    """
    if key is None:
        path = parent_path
    else:
        path = _child_path(tree, parent_path, key)

    node = tree.nodes.get(path)
    if node is None:
        if key is None:
            parent, key = _split_last(tree, path)
        else:
            parent = parent_path
        node = PathNode(tree, path, parent, key)
        tree.nodes[path] = node
        logger.debug("Created node %r", node)
    return node


def has_node(tree: "ObservableTree", parent_path: str, key: Any = None) -> bool:
    """Check whether a node already exists, without creating it."""
    path = parent_path if key is None else _child_path(tree, parent_path, key)
    return path in tree.nodes


def get_parent(node: PathNode) -> Optional[PathNode]:
    """Return the parent node, materializing it if needed. None for the root."""
    if node.parent is None:
        return None
    return get_node(node.tree, node.parent)


def get_child(container: Any, key: Any) -> Any:
    """
    Read one key from a dict or list with property-access semantics.

    Missing keys, out-of-range indices and non-container parents all read as
    None.
    """
    if isinstance(container, dict):
        return container.get(key)
    if isinstance(container, list):
        try:
            index = int(key)
        except (TypeError, ValueError):
            return None
        if -len(container) <= index < len(container):
            return container[index]
    return None


def get_value_at_path(tree: "ObservableTree", path: str) -> Any:
    """Walk the tree holder along the segments of an absolute path."""
    child: Any = tree.holder
    for segment in tree.segments(path):
        child = get_child(child, segment)
        if child is None:
            return None
    return child


def get_value(node: PathNode) -> Any:
    """Resolve the live value currently stored at a node's location."""
    return get_value_at_path(node.tree, node.path)


def join_path(keys: Iterable[Any], delimiter: str) -> str:
    """Join keys into a (relative) path string."""
    return delimiter.join(str(key) for key in keys)


def split_path(path: str, delimiter: str) -> List[str]:
    """Split a path string into its segments. The empty path has none."""
    return path.split(delimiter) if path else []
