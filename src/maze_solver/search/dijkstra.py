"""Lowest-cost search over (position, heading) states.

The driver is a small state machine. Each ``step()`` pops the cheapest
pending node; reaching the end cell with any heading finishes the search,
an empty frontier exhausts it, and otherwise the node's successors are
admitted into the frontier. Because edge weights are non-negative and
nodes pop in non-decreasing cost order, the first goal pop is optimal.

Optional node, cost and wall-clock limits cancel the search between
steps without touching the pop/expand/merge cycle.
"""

import time
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from maze_solver.core.data_models import FrontierNode, MazeMap, State
from maze_solver.search.frontier import Frontier, create_frontier
from maze_solver.search.transitions import (
    DEFAULT_STEP_COST, DEFAULT_TURN_COST, TransitionModel
)

logger = logging.getLogger(__name__)


class SearchStatus(Enum):
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


class SearchCancelledError(RuntimeError):
    """Raised when a limit stops a search before it found or exhausted."""

    def __init__(self, reason: str, result: 'SearchResult'):
        super().__init__(f"Search cancelled ({reason}) after {result.nodes_expanded} expansions")
        self.reason = reason
        self.result = result


@dataclass
class SearchConfig:
    """Configuration for the heading search."""
    step_cost: int = DEFAULT_STEP_COST
    turn_cost: int = DEFAULT_TURN_COST
    frontier: str = 'linked'  # 'linked' | 'heap'
    track_paths: bool = False  # Keep parent links for path reconstruction
    max_nodes_expanded: Optional[int] = None  # None = bounded only by the state space
    max_cost: Optional[int] = None
    max_computation_time: Optional[float] = None  # Seconds

    @classmethod
    def from_config(cls, search_cfg: Any) -> 'SearchConfig':
        """Build from the ``search`` section of a loaded configuration."""
        if not search_cfg:
            return cls()
        costs = search_cfg.get('costs', {}) or {}
        limits = search_cfg.get('limits', {}) or {}
        return cls(
            step_cost=int(costs.get('step', DEFAULT_STEP_COST)),
            turn_cost=int(costs.get('turn', DEFAULT_TURN_COST)),
            frontier=str(search_cfg.get('frontier', 'linked')),
            track_paths=bool(search_cfg.get('track_paths', False)),
            max_nodes_expanded=limits.get('max_nodes_expanded'),
            max_cost=limits.get('max_cost'),
            max_computation_time=limits.get('max_computation_time'),
        )


@dataclass
class SearchStatistics:
    """Counters collected while searching."""
    nodes_expanded: int = 0
    nodes_generated: int = 0
    max_frontier_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes_expanded': self.nodes_expanded,
            'nodes_generated': self.nodes_generated,
            'max_frontier_size': self.max_frontier_size,
        }


@dataclass
class SearchResult:
    """Outcome of a heading search. ``cost`` is None unless the end was reached."""
    status: SearchStatus
    cost: Optional[int] = None
    path: Optional[List[State]] = None
    nodes_expanded: int = 0
    nodes_generated: int = 0
    visited_count: int = 0
    computation_time: float = 0.0
    termination_reason: str = "unknown"
    statistics: Dict[str, Any] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.status is SearchStatus.FOUND

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'cost': self.cost,
            'path': [
                {'x': s.pos.x, 'y': s.pos.y, 'dir': s.dir.name.lower()} for s in self.path
            ] if self.path is not None else None,
            'nodes_expanded': self.nodes_expanded,
            'nodes_generated': self.nodes_generated,
            'visited_count': self.visited_count,
            'computation_time': self.computation_time,
            'termination_reason': self.termination_reason,
            'statistics': dict(self.statistics),
        }


class HeadingSearcher:
    """Dijkstra search from a start state to any heading on the end cell."""

    def __init__(self, maze: MazeMap, start: State, config: Optional[SearchConfig] = None):
        """Initialize the searcher.

        Args:
            maze: Read-only maze to search
            start: Initial state (start cell and heading)
            config: Search configuration parameters
        """
        self.maze = maze
        self.start = start
        self.config = config or SearchConfig()
        self.model = TransitionModel(maze, self.config.step_cost, self.config.turn_cost)

        self.frontier: Frontier
        self.statistics: SearchStatistics
        self.status: SearchStatus
        self.termination_reason: str
        self.goal_node: Optional[FrontierNode]
        self._start_time: float
        self._end_time: Optional[float]
        self.reset()

        logger.info(f"Heading searcher initialized on {maze.width}x{maze.height} maze, "
                    f"frontier={self.config.frontier}, turn_cost={self.config.turn_cost}")

    def reset(self) -> None:
        """Restart from the initial state with a fresh frontier."""
        self.frontier = create_frontier(self.config.frontier)
        self.frontier.seed(FrontierNode(self.start, 0))
        self.statistics = SearchStatistics(nodes_generated=1, max_frontier_size=1)
        self.status = SearchStatus.RUNNING
        self.termination_reason = "unknown"
        self.goal_node = None
        self._start_time = time.perf_counter()
        self._end_time = None

    @property
    def visited(self):
        return self.frontier.visited

    def step(self) -> SearchStatus:
        """Pop and process one node. Terminal states are sticky."""
        if self.status is not SearchStatus.RUNNING:
            return self.status

        node = self.frontier.pop()
        if node is None:
            return self._finish(SearchStatus.EXHAUSTED, "frontier_exhausted")

        if self.config.max_cost is not None and node.cost > self.config.max_cost:
            logger.warning(f"Search cancelled: cost {node.cost} exceeds ceiling {self.config.max_cost}")
            return self._finish(SearchStatus.CANCELLED, "cost_limit")

        if node.state.pos == self.maze.end:
            self.goal_node = node
            return self._finish(SearchStatus.FOUND, "goal_reached")

        # Limits only gate expansion; a goal already popped is still reported
        limit = self._limit_reached()
        if limit is not None:
            logger.warning(f"Search cancelled: {limit} after "
                           f"{self.statistics.nodes_expanded} expansions")
            return self._finish(SearchStatus.CANCELLED, limit)

        self._expand(node)
        return self.status

    def run(self, update_callback: Optional[Callable[['HeadingSearcher'], None]] = None) -> SearchResult:
        """Step until a terminal state and return the result.

        Args:
            update_callback: Optional hook called after every non-terminal step
        """
        while self.step() is SearchStatus.RUNNING:
            if update_callback is not None:
                update_callback(self)
        return self.result()

    def result(self) -> SearchResult:
        end_time = self._end_time if self._end_time is not None else time.perf_counter()
        path = None
        if self.goal_node is not None and self.config.track_paths:
            path = self.goal_node.get_path()
        return SearchResult(
            status=self.status,
            cost=self.goal_node.cost if self.goal_node is not None else None,
            path=path,
            nodes_expanded=self.statistics.nodes_expanded,
            nodes_generated=self.statistics.nodes_generated,
            visited_count=len(self.frontier.visited),
            computation_time=end_time - self._start_time,
            termination_reason=self.termination_reason,
            statistics=self.statistics.to_dict(),
        )

    def _expand(self, node: FrontierNode) -> None:
        parent = node if self.config.track_paths else None
        children = [
            FrontierNode(t.state, node.cost + t.cost, parent=parent)
            for t in self.model.successors(node.state, self.frontier.visited)
        ]
        admitted = self.frontier.admit(children)

        self.statistics.nodes_expanded += 1
        self.statistics.nodes_generated += len(admitted)
        self.statistics.max_frontier_size = max(self.statistics.max_frontier_size, len(self.frontier))

    def _limit_reached(self) -> Optional[str]:
        max_nodes = self.config.max_nodes_expanded
        if max_nodes is not None and self.statistics.nodes_expanded >= max_nodes:
            return "node_limit"
        max_time = self.config.max_computation_time
        if max_time is not None and time.perf_counter() - self._start_time > max_time:
            return "timeout"
        return None

    def _finish(self, status: SearchStatus, reason: str) -> SearchStatus:
        self.status = status
        self.termination_reason = reason
        self._end_time = time.perf_counter()
        if status is SearchStatus.FOUND:
            logger.info(f"Reached end {self.maze.end} at cost {self.goal_node.cost} "
                        f"({self.statistics.nodes_expanded} expansions, "
                        f"{len(self.frontier.visited)} states admitted)")
        else:
            logger.info(f"Search stopped ({reason}) after {self.statistics.nodes_expanded} expansions")
        return status


def create_searcher(maze: MazeMap, start: State,
                    step_cost: int = DEFAULT_STEP_COST,
                    turn_cost: int = DEFAULT_TURN_COST,
                    frontier: str = 'linked',
                    track_paths: bool = False,
                    max_nodes_expanded: Optional[int] = None,
                    max_cost: Optional[int] = None,
                    max_computation_time: Optional[float] = None) -> HeadingSearcher:
    """Factory function to create a configured searcher."""
    config = SearchConfig(
        step_cost=step_cost,
        turn_cost=turn_cost,
        frontier=frontier,
        track_paths=track_paths,
        max_nodes_expanded=max_nodes_expanded,
        max_cost=max_cost,
        max_computation_time=max_computation_time,
    )
    return HeadingSearcher(maze, start, config)


def find_lowest_cost(maze: MazeMap, start: State, **kwargs) -> Optional[int]:
    """Lowest total cost from ``start`` to the end cell, or None if unreachable.

    Raises:
        SearchCancelledError: If a node, cost or time limit stopped the search
            before reachability was decided
    """
    result = create_searcher(maze, start, **kwargs).run()
    if result.status is SearchStatus.CANCELLED:
        raise SearchCancelledError(result.termination_reason, result)
    return result.cost
