"""Frontier of admitted, not yet expanded search states.

The primary frontier is a singly linked chain of ``FrontierNode`` kept
in non-decreasing cost order. New nodes are sorted as a batch and
merge-inserted into the chain in linear time. On equal cost, nodes of
the new batch go before nodes already in the chain.

Every admitted state is recorded in the visited set at admission time,
so a state is enqueued at most once over the life of a search. This is
only sound because edge weights are non-negative and pops come out in
non-decreasing cost order.
"""

import heapq
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from maze_solver.core.data_models import FrontierNode, State

logger = logging.getLogger(__name__)

FRONTIER_KINDS = ('linked', 'heap')


def iter_chain(head: Optional[FrontierNode]) -> Iterator[FrontierNode]:
    """Iterate the nodes of a chain from head to tail."""
    node = head
    while node is not None:
        yield node
        node = node.next


def chain_from_nodes(nodes: Iterable[FrontierNode]) -> Optional[FrontierNode]:
    """Stable-sort nodes by cost and link them into a chain."""
    ordered = sorted(nodes, key=lambda n: n.cost)
    head: Optional[FrontierNode] = None
    for node in reversed(ordered):
        node.next = head
        head = node
    return head


def merge_insert(existing: Optional[FrontierNode],
                 new_sorted: Optional[FrontierNode]) -> Optional[FrontierNode]:
    """Merge two cost-sorted chains into one cost-sorted chain.

    Args:
        existing: Chain already in the frontier
        new_sorted: Chain of freshly generated nodes

    Returns:
        Head of the merged chain. On equal cost, nodes from ``new_sorted``
        precede nodes from ``existing``.
    """
    if new_sorted is None:
        return existing
    if existing is None:
        return new_sorted

    if new_sorted.cost <= existing.cost:
        head, new_sorted = new_sorted, new_sorted.next
    else:
        head, existing = existing, existing.next
    tail = head

    while existing is not None and new_sorted is not None:
        if new_sorted.cost <= existing.cost:
            tail.next, new_sorted = new_sorted, new_sorted.next
        else:
            tail.next, existing = existing, existing.next
        tail = tail.next

    tail.next = existing if existing is not None else new_sorted
    return head


def pop_min(head: Optional[FrontierNode]) -> Tuple[Optional[FrontierNode], Optional[FrontierNode]]:
    """Detach the lowest-cost node.

    Returns:
        ``(node, remainder)``, or ``(None, None)`` for an empty chain
    """
    if head is None:
        return None, None
    remainder = head.next
    head.next = None
    return head, remainder


class Frontier(ABC):
    """Pending nodes in ascending cost order plus the set of admitted states."""

    kind = 'abstract'

    def __init__(self):
        self.visited: Set[State] = set()

    def __contains__(self, state: State) -> bool:
        return state in self.visited

    def seed(self, node: FrontierNode) -> None:
        """Admit the root node of a search."""
        self.admit([node])

    def _record(self, nodes: Iterable[FrontierNode]) -> List[FrontierNode]:
        admitted = []
        for node in nodes:
            if node.state in self.visited:
                continue
            self.visited.add(node.state)
            admitted.append(node)
        return admitted

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def admit(self, nodes: Iterable[FrontierNode]) -> List[FrontierNode]:
        """Record and enqueue the nodes whose state was never admitted.

        Returns:
            The admitted nodes, in the order given
        """
        pass

    @abstractmethod
    def pop(self) -> Optional[FrontierNode]:
        """Remove and return the lowest-cost node, or None when empty."""
        pass

    @abstractmethod
    def peek(self) -> Optional[FrontierNode]:
        pass

    @abstractmethod
    def costs(self) -> List[int]:
        """Pending costs in pop order."""
        pass


class LinkedFrontier(Frontier):
    """Sorted linked-chain frontier."""

    kind = 'linked'

    def __init__(self):
        super().__init__()
        self.head: Optional[FrontierNode] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def admit(self, nodes: Iterable[FrontierNode]) -> List[FrontierNode]:
        """Record and enqueue the nodes whose state was never admitted.

        Returns:
            The admitted nodes, in the order given
        """
        admitted = self._record(nodes)
        if admitted:
            self.head = merge_insert(self.head, chain_from_nodes(admitted))
            self._size += len(admitted)
        return admitted

    def pop(self) -> Optional[FrontierNode]:
        node, self.head = pop_min(self.head)
        if node is not None:
            self._size -= 1
        return node

    def peek(self) -> Optional[FrontierNode]:
        return self.head

    def costs(self) -> List[int]:
        return [node.cost for node in iter_chain(self.head)]


class HeapFrontier(Frontier):
    """Binary-heap frontier with the same pop order as ``LinkedFrontier``.

    Heap keys are ``(cost, -batch, index)``: equal-cost nodes from a newer
    admission batch pop first, and within a batch the given order holds.
    """

    kind = 'heap'

    def __init__(self):
        super().__init__()
        self._heap: List[Tuple[int, int, int, FrontierNode]] = []
        self._batch = 0

    def admit(self, nodes: Iterable[FrontierNode]) -> List[FrontierNode]:
        admitted = self._record(nodes)
        if admitted:
            self._batch += 1
            ordered = sorted(admitted, key=lambda n: n.cost)
            for index, node in enumerate(ordered):
                heapq.heappush(self._heap, (node.cost, -self._batch, index, node))
        return admitted

    def __len__(self) -> int:
        return len(self._heap)

    def pop(self) -> Optional[FrontierNode]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[3]

    def peek(self) -> Optional[FrontierNode]:
        return self._heap[0][3] if self._heap else None

    def costs(self) -> List[int]:
        return [entry[0] for entry in sorted(self._heap)]


def create_frontier(kind: str = 'linked') -> Frontier:
    """Create a frontier by name (``linked`` or ``heap``)."""
    logger.debug(f"Creating {kind} frontier")
    if kind == 'linked':
        return LinkedFrontier()
    if kind == 'heap':
        return HeapFrontier()
    raise ValueError(f"Unknown frontier kind: {kind!r} (expected one of {FRONTIER_KINDS})")
