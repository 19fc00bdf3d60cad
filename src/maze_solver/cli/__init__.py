"""Command-line interface for the maze solver.

This module provides CLI commands for solving individual mazes and batch processing.
"""

from .main import main_cli
from .commands import solve_command, batch_command, config_command
from .utils import setup_logging, save_results

__all__ = [
    'main_cli',
    'solve_command',
    'batch_command',
    'config_command',
    'setup_logging',
    'save_results'
]
