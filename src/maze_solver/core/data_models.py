"""Core data models for the maze solver."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterator, List, Optional, Tuple
import numpy as np


@dataclass(frozen=True)
class Position:
    """Integer grid coordinates. ``x`` is the column, ``y`` the row (growing downward)."""

    x: int
    y: int

    def shifted(self, direction: 'Direction') -> 'Position':
        """Position one cell away along ``direction``."""
        dx, dy = direction.offset
        return Position(self.x + dx, self.y + dy)

    def manhattan(self, other: 'Position') -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)


class Direction(Enum):
    """Heading of the walker on the grid."""

    UP = (0, -1, '^')
    RIGHT = (1, 0, '>')
    DOWN = (0, 1, 'v')
    LEFT = (-1, 0, '<')

    def __init__(self, dx: int, dy: int, glyph: str):
        self.offset = (dx, dy)
        self.glyph = glyph

    @property
    def side_turns(self) -> Tuple['Direction', 'Direction']:
        """The two headings reachable by a single 90 degree turn."""
        return _SIDE_TURNS[self]

    @classmethod
    def from_name(cls, name: str) -> 'Direction':
        """Parse a heading name such as ``"right"`` (case-insensitive)."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown direction: {name!r}")

    def __str__(self) -> str:
        return self.glyph


_SIDE_TURNS = {
    Direction.UP: (Direction.LEFT, Direction.RIGHT),
    Direction.DOWN: (Direction.LEFT, Direction.RIGHT),
    Direction.RIGHT: (Direction.UP, Direction.DOWN),
    Direction.LEFT: (Direction.UP, Direction.DOWN),
}


class CellType(IntEnum):
    """Cell codes stored in the maze array."""

    WALL = 0
    EMPTY = 1
    START = 2
    END = 3


@dataclass(frozen=True)
class State:
    """Search vertex: a position together with a heading."""

    pos: Position
    dir: Direction

    def __str__(self) -> str:
        return f"{self.dir} ({self.pos.x},{self.pos.y})"


@dataclass
class MazeMap:
    """Read-only typed grid with the located start and end cells."""

    cells: np.ndarray  # [y, x] CellType codes
    start: Position
    end: Position

    def __post_init__(self) -> None:
        """Validate the grid and freeze the underlying array."""
        assert self.cells.ndim == 2, f"Maze grid must be 2D, got {self.cells.ndim}D"
        assert self.in_bounds(self.start), f"Start {self.start} outside grid"
        assert self.in_bounds(self.end), f"End {self.end} outside grid"
        self.cells.flags.writeable = False

    @property
    def height(self) -> int:
        return self.cells.shape[0]

    @property
    def width(self) -> int:
        return self.cells.shape[1]

    @property
    def state_space_size(self) -> int:
        """Upper bound on distinct search states (every cell with every heading)."""
        return self.width * self.height * len(Direction)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def cell_at(self, pos: Position) -> CellType:
        return CellType(int(self.cells[pos.y, pos.x]))

    def is_open(self, pos: Position) -> bool:
        """True if ``pos`` is inside the grid and not a wall."""
        return self.in_bounds(pos) and self.cells[pos.y, pos.x] != CellType.WALL

    def count(self, cell_type: CellType) -> int:
        return int(np.count_nonzero(self.cells == cell_type))


class FrontierNode:
    """Admitted search state with its cumulative cost.

    Nodes link into a chain kept sorted by non-decreasing ``cost``.
    ``parent`` is only set when path tracking is enabled.
    """

    __slots__ = ('state', 'cost', 'next', 'parent')

    def __init__(self, state: State, cost: int,
                 parent: Optional['FrontierNode'] = None,
                 next: Optional['FrontierNode'] = None):
        self.state = state
        self.cost = cost
        self.parent = parent
        self.next = next

    def __lt__(self, other: 'FrontierNode') -> bool:
        return self.cost < other.cost

    def __repr__(self) -> str:
        return f"FrontierNode({self.state}, cost={self.cost})"

    def iter_path(self) -> Iterator[State]:
        """Yield states from this node back to the root."""
        node: Optional[FrontierNode] = self
        while node is not None:
            yield node.state
            node = node.parent

    def get_path(self) -> List[State]:
        """Reconstruct the state sequence from the root to this node."""
        return list(reversed(list(self.iter_path())))

