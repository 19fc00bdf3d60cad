"""Maze loading: text grid parsing and file I/O."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import numpy as np

from maze_solver.core.data_models import CellType, Direction, MazeMap, Position, State

logger = logging.getLogger(__name__)


class MazeParseError(ValueError):
    """Raised when a maze grid is malformed."""
    pass


@dataclass(frozen=True)
class MarkerAlphabet:
    """Characters used to draw each cell type."""

    wall: str = '#'
    empty: str = '.'
    start: str = 'S'
    end: str = 'E'

    def __post_init__(self) -> None:
        chars = [self.wall, self.empty, self.start, self.end]
        if any(not isinstance(c, str) or len(c) != 1 for c in chars):
            raise ValueError(f"Markers must be single characters, got {chars}")
        if len(set(chars)) != 4:
            raise ValueError(f"Markers must be distinct, got {chars}")

    def to_mapping(self) -> Dict[str, CellType]:
        return {
            self.wall: CellType.WALL,
            self.empty: CellType.EMPTY,
            self.start: CellType.START,
            self.end: CellType.END,
        }

    def glyph(self, cell_type: CellType) -> str:
        return {
            CellType.WALL: self.wall,
            CellType.EMPTY: self.empty,
            CellType.START: self.start,
            CellType.END: self.end,
        }[cell_type]


class MazeLoader:
    """Parser for rectangular text mazes."""

    def __init__(self, alphabet: Optional[MarkerAlphabet] = None,
                 initial_heading: Direction = Direction.RIGHT):
        """Initialize the loader.

        Args:
            alphabet: Marker characters (defaults to ``# . S E``)
            initial_heading: Heading of the walker on the start cell
        """
        self.alphabet = alphabet or MarkerAlphabet()
        self.initial_heading = initial_heading
        self._mapping = self.alphabet.to_mapping()

    def parse(self, text: str) -> Tuple[MazeMap, State]:
        """Parse grid text into a maze and the initial search state.

        Args:
            text: Newline-separated rows of marker characters

        Returns:
            Tuple of (MazeMap, initial State)

        Raises:
            MazeParseError: If the grid is empty, ragged, contains unknown
                characters, or lacks a unique start or end marker
        """
        rows = _split_rows(text)
        if not rows:
            raise MazeParseError("Maze input does not contain a single row")

        width = len(rows[0])
        if width == 0:
            raise MazeParseError("Maze first row is empty")

        codes = np.empty((len(rows), width), dtype=np.int8)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise MazeParseError(
                    f"Ragged grid: row {y} has length {len(row)}, expected {width}"
                )
            for x, char in enumerate(row):
                cell_type = self._mapping.get(char)
                if cell_type is None:
                    raise MazeParseError(
                        f"Failed to parse character {char!r} at row {y}, column {x}"
                    )
                codes[y, x] = cell_type

        start = _locate_unique(codes, CellType.START, "start")
        end = _locate_unique(codes, CellType.END, "end")

        maze = MazeMap(cells=codes, start=start, end=end)
        logger.debug(f"Parsed maze {maze.width}x{maze.height}, start={start}, end={end}")
        return maze, State(start, self.initial_heading)

    def load(self, file_path: Union[str, Path]) -> Tuple[MazeMap, State]:
        """Load and parse a maze file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            MazeParseError: If the grid is malformed
        """
        return self.parse(read_maze_text(file_path))

    def render(self, maze: MazeMap, path: Optional[List[State]] = None) -> str:
        """Draw the maze back as text, overlaying heading glyphs along ``path``.

        Start and end markers are never overwritten.
        """
        lines = [[self.alphabet.glyph(CellType(int(c))) for c in row] for row in maze.cells]
        for state in path or []:
            if maze.cell_at(state.pos) == CellType.EMPTY:
                lines[state.pos.y][state.pos.x] = state.dir.glyph
        return "\n".join("".join(line) for line in lines)


def _split_rows(text: str) -> List[str]:
    rows = text.splitlines()
    while rows and not rows[-1].strip():
        rows.pop()
    return rows


def _locate_unique(codes: np.ndarray, cell_type: CellType, label: str) -> Position:
    ys, xs = np.nonzero(codes == cell_type)
    if len(ys) == 0:
        raise MazeParseError(f"Maze has no {label} marker")
    if len(ys) > 1:
        found = ", ".join(f"({x},{y})" for x, y in zip(xs.tolist(), ys.tolist()))
        raise MazeParseError(f"Maze has {len(ys)} {label} markers: {found}")
    return Position(int(xs[0]), int(ys[0]))


def parse_maze(text: str,
               alphabet: Optional[MarkerAlphabet] = None,
               initial_heading: Direction = Direction.RIGHT) -> Tuple[MazeMap, State]:
    """Parse grid text with a throwaway loader."""
    return MazeLoader(alphabet, initial_heading).parse(text)


def load_maze_from_file(file_path: Union[str, Path],
                        alphabet: Optional[MarkerAlphabet] = None,
                        initial_heading: Direction = Direction.RIGHT) -> Tuple[MazeMap, State]:
    """Load a maze file with a throwaway loader."""
    return MazeLoader(alphabet, initial_heading).load(file_path)


def read_maze_text(file_path: Union[str, Path]) -> str:
    """Read a maze file as UTF-8 text.

    Raises:
        FileNotFoundError: If the file doesn't exist
        MazeParseError: If the bytes are not valid UTF-8
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Maze file not found: {file_path}")

    try:
        return file_path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise MazeParseError(
            f"Maze file {file_path} is not valid UTF-8 text (byte {e.start}: {e.reason})"
        ) from e
