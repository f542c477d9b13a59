"""
Test utilities for obstree.

Recorder collects listener invocations; arena helpers check that the
identity side table matches the reachable data.
"""

from typing import Any, List, Tuple

from obstree import ListenerInfo, ObservableTree


class Recorder:
    """Listener callback that records every call.

    Examples:
        >>> calls = Recorder()
        >>> tree.root.on_change(calls)
        >>> tree.root.set("x", 1)
        >>> calls.count
        1
    """

    def __init__(self):
        self.calls: List[Tuple[Any, ListenerInfo]] = []

    def __call__(self, value: Any, info: ListenerInfo) -> None:
        self.calls.append((value, info))

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last(self) -> Tuple[Any, ListenerInfo]:
        return self.calls[-1]

    @property
    def infos(self) -> List[ListenerInfo]:
        return [info for _, info in self.calls]


def reachable_containers(value: Any) -> List[Any]:
    """Every dict and list reachable from value, including value itself."""
    found = []
    if isinstance(value, (dict, list)):
        found.append(value)
        children = value if isinstance(value, list) else value.values()
        for child in children:
            found.extend(reachable_containers(child))
    return found


def assert_arena_matches_tree(tree: ObservableTree) -> None:
    """Every reachable container is tracked, and nothing else is."""
    reachable = reachable_containers(tree.value)
    for container in reachable:
        assert container in tree.arena, f"untracked container {container!r}"
    assert tree.arena.live == len({id(c) for c in reachable})
