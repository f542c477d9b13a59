"""
Handle Arena - Identity Side Table for Tracked Values
=====================================================

Plain dicts and lists cannot carry hidden attributes, so the tree keeps an
arena that maps each tracked container to the PathNode it was attached at.

Key Features:
- Integer handles with free-list reuse on detach
- Per-slot generation counters, so a handle kept past its detach can never
  resolve to the unrelated value that later reuses the slot
- Reverse index keyed by ``id(value)``; the arena holds a strong reference to
  every tracked value, so an id can not be recycled while it is registered

Each ObservableTree owns its own arena; trees never share handles.
"""

import array
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

N = TypeVar("N")


class HandleArena(Generic[N]):
    """
    Generational arena mapping integer handles to (value, node) slots.

    Usage:
        arena = HandleArena()
        handle, generation = arena.allocate(value, node)
        arena.lookup(handle, generation)  # -> node
        arena.free(handle)
        arena.lookup(handle, generation)  # -> None
    """

    def __init__(self):
        self.count = 0
        self.values: List[Any] = []
        self.nodes: List[Optional[N]] = []
        self.generations = array.array("Q")
        self.free_list: List[int] = []
        self._by_id: Dict[int, int] = {}

    def allocate(self, value: Any, node: N) -> Tuple[int, int]:
        """
        Register a value, return its (handle, generation).

        Reuses a freed slot when one is available.
        """
        if self.free_list:
            handle = self.free_list.pop()
            self.values[handle] = value
            self.nodes[handle] = node
        else:
            handle = self.count
            self.count += 1
            self.values.append(value)
            self.nodes.append(node)
            self.generations.append(0)

        self._by_id[id(value)] = handle
        return handle, self.generations[handle]

    def free(self, handle: int) -> None:
        """Release a slot and invalidate every outstanding reference to it."""
        value = self.values[handle]
        if self.nodes[handle] is None:
            return
        del self._by_id[id(value)]
        self.values[handle] = None
        self.nodes[handle] = None
        self.generations[handle] += 1
        self.free_list.append(handle)

    def lookup(self, handle: int, generation: int) -> Optional[N]:
        """Resolve a handle to its node, or None if it was freed since."""
        if handle >= self.count or self.generations[handle] != generation:
            return None
        return self.nodes[handle]

    def handle_of(self, value: Any) -> Optional[int]:
        return self._by_id.get(id(value))

    def node_of(self, value: Any) -> Optional[N]:
        handle = self.handle_of(value)
        return None if handle is None else self.nodes[handle]

    def generation_of(self, handle: int) -> int:
        return self.generations[handle]

    @property
    def live(self) -> int:
        """Number of currently tracked values."""
        return self.count - len(self.free_list)

    @property
    def capacity(self) -> int:
        """Number of slots ever allocated."""
        return self.count

    def __len__(self) -> int:
        return self.live

    def __contains__(self, value: Any) -> bool:
        return self.handle_of(value) is not None
