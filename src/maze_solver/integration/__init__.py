"""Maze file loading and rendering."""

from .io import (
    MazeLoader, MazeParseError, MarkerAlphabet, parse_maze, load_maze_from_file, read_maze_text
)

__all__ = [
    'MazeLoader',
    'MazeParseError',
    'MarkerAlphabet',
    'parse_maze',
    'load_maze_from_file',
    'read_maze_text'
]
