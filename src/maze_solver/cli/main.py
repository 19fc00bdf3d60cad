"""Main CLI entry point for the maze solver."""

import sys
import argparse
import logging
from typing import List, Optional

from maze_solver import __version__
from maze_solver.search.frontier import FRONTIER_KINDS

from . import commands
from .utils import setup_logging

EPILOG = """
Examples:
  maze-solver solve maze.txt                    # Print the lowest cost
  maze-solver solve maze.txt --show-path        # Also draw the path
  maze-solver batch mazes/ --threads 4          # Solve every *.txt maze in a folder
  maze-solver -c search.costs.turn=500 solve maze.txt
  maze-solver config set search.frontier heap
"""


def _add_search_options(parser: argparse.ArgumentParser, per_maze: str = '') -> None:
    """Limit and frontier flags shared by ``solve`` and ``batch``."""
    parser.add_argument(
        '--timeout', '-t',
        type=float,
        help=f'Wall-clock limit{per_maze} in seconds (default: from configuration)'
    )
    parser.add_argument(
        '--max-nodes',
        type=int,
        help=f'Cancel{per_maze} after expanding this many nodes'
    )
    parser.add_argument(
        '--max-cost',
        type=int,
        help='Cancel once the cheapest pending cost exceeds this value'
    )
    parser.add_argument(
        '--frontier',
        choices=list(FRONTIER_KINDS),
        help='Frontier implementation (default: from configuration)'
    )


def create_parser() -> argparse.ArgumentParser:
    """Build the ``maze-solver`` argument parser."""
    parser = argparse.ArgumentParser(
        prog='maze-solver',
        description='Lowest-cost maze paths where turning costs more than stepping',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--config', '-c',
        action='append',
        metavar='KEY=VALUE',
        help='Hydra configuration override, repeatable (e.g. search.costs.turn=500)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='More log output (-v info, -vv debug)'
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Only print results and errors'
    )
    parser.add_argument(
        '--output', '-o',
        help='Write results (JSON) or the edited configuration (YAML) to this file'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')

    solve_parser = subparsers.add_parser(
        'solve',
        help='Solve a single maze',
        description='Print the lowest cost from the start marker to the end marker'
    )
    solve_parser.add_argument('maze_file', help='Maze text file')
    _add_search_options(solve_parser)
    solve_parser.add_argument(
        '--show-path',
        action='store_true',
        help='Draw the lowest-cost path with heading glyphs'
    )

    batch_parser = subparsers.add_parser(
        'batch',
        help='Solve many mazes',
        description='Solve every *.txt maze under a directory, or every path listed in a .lst file'
    )
    batch_parser.add_argument('input_path', help='Directory, .lst file or single maze file')
    _add_search_options(batch_parser, per_maze=' per maze')
    batch_parser.add_argument('--threads', '-j', type=int, default=1,
                              help='Mazes solved in parallel (default: 1)')
    batch_parser.add_argument('--max-tasks', type=int, help='Solve at most this many mazes')
    batch_parser.add_argument('--shuffle', action='store_true', help='Shuffle maze order')
    batch_parser.add_argument('--report-interval', type=int, default=10,
                              help='Print progress every N mazes (default: 10)')

    config_parser = subparsers.add_parser(
        'config',
        help='Inspect or edit configuration',
        description='Show, validate or edit conf/config.yaml with overrides applied'
    )
    config_subparsers = config_parser.add_subparsers(dest='config_action', metavar='ACTION')
    config_subparsers.add_parser('show', help='Print the composed configuration')
    config_subparsers.add_parser('validate', help='Validate the composed configuration')
    set_parser = config_subparsers.add_parser(
        'set',
        help='Apply and validate one value; with --output, save the result'
    )
    set_parser.add_argument('key', help='Dotted key (e.g. search.costs.turn)')
    set_parser.add_argument('value', help='New value')

    return parser


def _log_level(verbose: int, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    return {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)


def main_cli(args: Optional[List[str]] = None) -> int:
    """Run the CLI.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Process exit code
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(_log_level(parsed_args.verbose, parsed_args.quiet))
    logger = logging.getLogger(__name__)

    if not parsed_args.command:
        parser.print_help()
        return 1

    handler = getattr(commands, f"{parsed_args.command}_command")
    try:
        return handler(parsed_args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


def main() -> None:
    """Entry point for console script."""
    sys.exit(main_cli())


if __name__ == '__main__':
    main()
