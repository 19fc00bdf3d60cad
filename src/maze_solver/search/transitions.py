"""Weighted transition model over (position, heading) states.

Every state has at most three outgoing edges: a forward step, and a
turn fused with the following step on each side. A rotation without a
step is never offered on its own.
"""

import logging
from typing import AbstractSet, List, NamedTuple, Optional

from maze_solver.core.data_models import Direction, MazeMap, State

logger = logging.getLogger(__name__)

DEFAULT_STEP_COST = 1
DEFAULT_TURN_COST = 1000


class Transition(NamedTuple):
    """Outgoing edge of a state."""
    state: State
    cost: int
    action: str  # 'forward' | 'turn_<direction>'


class TransitionModel:
    """Generates successor states on a read-only maze."""

    def __init__(self, maze: MazeMap,
                 step_cost: int = DEFAULT_STEP_COST,
                 turn_cost: int = DEFAULT_TURN_COST):
        """Initialize the transition model.

        Args:
            maze: Maze the walker moves on
            step_cost: Cost of advancing one cell
            turn_cost: Extra cost of a 90 degree turn before a step
        """
        if step_cost < 0 or turn_cost < 0:
            raise ValueError(
                f"Transition costs must be non-negative, got step={step_cost}, turn={turn_cost}"
            )
        self.maze = maze
        self.step_cost = step_cost
        self.turn_cost = turn_cost

    @property
    def turn_step_cost(self) -> int:
        return self.turn_cost + self.step_cost

    def forward(self, state: State) -> Optional[Transition]:
        """Step one cell along the current heading, if the target is open."""
        target = state.pos.shifted(state.dir)
        if not self.maze.is_open(target):
            return None
        return Transition(State(target, state.dir), self.step_cost, 'forward')

    def turn(self, state: State, heading: Direction) -> Optional[Transition]:
        """Turn to ``heading`` and step one cell, if the target is open."""
        target = state.pos.shifted(heading)
        if not self.maze.is_open(target):
            return None
        return Transition(State(target, heading), self.turn_step_cost,
                          f'turn_{heading.name.lower()}')

    def transitions(self, state: State) -> List[Transition]:
        """All valid transitions, ordered forward, side A, side B."""
        candidates = [self.forward(state)]
        candidates.extend(self.turn(state, heading) for heading in state.dir.side_turns)
        return [t for t in candidates if t is not None]

    def successors(self, state: State,
                   visited: Optional[AbstractSet[State]] = None) -> List[Transition]:
        """Valid transitions whose target state has not been admitted yet."""
        result = self.transitions(state)
        if visited:
            result = [t for t in result if t.state not in visited]
        return result
