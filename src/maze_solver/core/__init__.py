"""Core data models for the maze solver."""

from .data_models import CellType, Direction, FrontierNode, MazeMap, Position, State

__all__ = [
    'CellType',
    'Direction',
    'FrontierNode',
    'MazeMap',
    'Position',
    'State'
]
