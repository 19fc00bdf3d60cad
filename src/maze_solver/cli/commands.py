"""CLI command implementations."""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from maze_solver import __version__
from maze_solver.config import ConfigManager, validate_config, ConfigValidationError
from maze_solver.config.validators import check_config_consistency
from maze_solver.integration.io import MazeLoader, MazeParseError, read_maze_text
from maze_solver.search.dijkstra import HeadingSearcher, SearchStatus

from .utils import (
    save_results, find_maze_files, format_duration,
    ProgressReporter, create_result_summary, print_summary
)

logger = logging.getLogger(__name__)


class MazeSolver:
    """Solves maze text or files with one loaded configuration."""

    def __init__(self, config_overrides: Optional[List[str]] = None):
        """
        Args:
            config_overrides: Hydra overrides applied on top of ``conf/config.yaml``
        """
        self.config_manager = ConfigManager()
        self.config = self.config_manager.load_config(overrides=config_overrides)

        self.loader = MazeLoader(self.config_manager.marker_alphabet(),
                                 self.config_manager.initial_heading())
        self.search_config = self.config_manager.search_config()

        self.rng = self._create_rng()
        self.solved_count = 0
        self.attempted_count = 0

        logger.info(f"Maze solver ready (frontier={self.search_config.frontier}, "
                    f"turn_cost={self.search_config.turn_cost})")

    def _create_rng(self) -> random.Random:
        """RNG for batch ordering, seeded when deterministic mode is enabled."""
        testing_cfg = self.config_manager.get_parameter('development.testing', {})
        if not testing_cfg or not testing_cfg.get('deterministic_mode', False):
            return random.Random()

        seed = int(testing_cfg.get('random_seed', 42))
        logger.debug(f"Deterministic mode, seed {seed}")
        return random.Random(seed)

    def solve_text(self, text: str, maze_id: Optional[str] = None) -> Dict[str, Any]:
        """Solve a maze given as text.

        Raises:
            MazeParseError: If the grid is malformed
        """
        start_time = time.perf_counter()
        maze, start = self.loader.parse(text)
        result = HeadingSearcher(maze, start, self.search_config).run()

        record = {
            'maze_id': maze_id,
            'success': result.found,
            'status': result.status.value,
            'cost': result.cost,
            'path': result.to_dict()['path'],
            'search_stats': {
                'nodes_expanded': result.nodes_expanded,
                'nodes_generated': result.nodes_generated,
                'visited_count': result.visited_count,
                'state_space_size': maze.state_space_size,
                'termination_reason': result.termination_reason,
            },
            'computation_time': time.perf_counter() - start_time,
        }
        if result.path is not None:
            record['rendered'] = self.loader.render(maze, result.path)
        return record

    def solve_file(self, maze_file: Union[str, Path]) -> Dict[str, Any]:
        """Solve a maze file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            MazeParseError: If the file is not UTF-8 text or the grid is malformed
        """
        maze_file = Path(maze_file)
        record = self.solve_text(read_maze_text(maze_file), maze_id=maze_file.stem)
        record['maze_file'] = str(maze_file)
        return record

    def record(self, result: Dict[str, Any]) -> None:
        """Count a finished record. Call from one thread only."""
        self.attempted_count += 1
        if result.get('success'):
            self.solved_count += 1

    def get_stats(self) -> Dict[str, Any]:
        return {
            'attempted': self.attempted_count,
            'solved': self.solved_count,
            'frontier': self.search_config.frontier,
        }


def _config_overrides(args) -> List[str]:
    """Hydra overrides from command flags, then from global ``-c`` options."""
    flag_keys = [
        ('timeout', 'search.limits.max_computation_time'),
        ('max_nodes', 'search.limits.max_nodes_expanded'),
        ('max_cost', 'search.limits.max_cost'),
        ('frontier', 'search.frontier'),
    ]
    overrides = [
        f"{key}={getattr(args, attr)}"
        for attr, key in flag_keys
        if getattr(args, attr, None) is not None
    ]
    if getattr(args, 'show_path', False):
        overrides.append("search.track_paths=true")
    overrides.extend(getattr(args, 'config', None) or [])
    return overrides


def _error_record(maze_file: Path, error: Exception) -> Dict[str, Any]:
    return {
        'maze_id': maze_file.stem,
        'maze_file': str(maze_file),
        'success': False,
        'status': 'error',
        'cost': None,
        'error': str(error),
        'computation_time': 0.0,
    }


def solve_command(args) -> int:
    """Solve one maze and print its cost.

    Returns:
        0 when the search finished (path or no path), 1 on load errors or cancellation
    """
    try:
        solver = MazeSolver(_config_overrides(args))
        logger.info(f"Solving maze from {args.maze_file}")
        result = solver.solve_file(args.maze_file)
        solver.record(result)
        result['solver_version'] = __version__

        if args.output:
            save_results(result, args.output)
            logger.info(f"Results saved to {args.output}")

        status = SearchStatus(result['status'])
        stats = result['search_stats']
        if status is SearchStatus.FOUND:
            print(result['cost'])
        elif status is SearchStatus.EXHAUSTED:
            print("no path")
        else:
            print(f"cancelled ({stats['termination_reason']})")

        if args.show_path and 'rendered' in result:
            print(result['rendered'])

        logger.info(f"Expanded {stats['nodes_expanded']} nodes, admitted "
                    f"{stats['visited_count']}/{stats['state_space_size']} states "
                    f"in {format_duration(result['computation_time'])}")

        return 1 if status is SearchStatus.CANCELLED else 0

    except (FileNotFoundError, MazeParseError) as e:
        logger.error(f"Cannot load maze: {e}")
        return 1
    except Exception as e:
        logger.error(f"Solve command failed: {e}")
        return 1


def batch_command(args) -> int:
    """Solve every maze under a directory or listed in a ``.lst`` file.

    Returns:
        0 unless some maze could not be loaded
    """
    try:
        maze_files = find_maze_files(args.input_path, args.max_tasks)
        if not maze_files:
            logger.error(f"No maze files found in {args.input_path}")
            return 1
        logger.info(f"Found {len(maze_files)} maze files")

        solver = MazeSolver(_config_overrides(args))
        if args.shuffle:
            solver.rng.shuffle(maze_files)
        progress = ProgressReporter(len(maze_files), args.report_interval)

        def solve_one(maze_file: Path) -> Dict[str, Any]:
            try:
                return solver.solve_file(maze_file)
            except (FileNotFoundError, MazeParseError) as e:
                logger.error(f"Failed to load {maze_file}: {e}")
                return _error_record(maze_file, e)

        results = []
        start_time = time.perf_counter()
        if args.threads <= 1:
            for maze_file in maze_files:
                results.append(solve_one(maze_file))
                solver.record(results[-1])
                progress.update(results[-1]['status'])
        else:
            with ThreadPoolExecutor(max_workers=args.threads) as executor:
                futures = {executor.submit(solve_one, maze_file): i
                           for i, maze_file in enumerate(maze_files)}
                ordered: List[Optional[Dict[str, Any]]] = [None] * len(maze_files)
                for future in as_completed(futures):
                    result = future.result()
                    ordered[futures[future]] = result
                    solver.record(result)
                    progress.update(result['status'])
            results = ordered
        wall_clock_time = time.perf_counter() - start_time
        stats = solver.get_stats()
        logger.info(f"Solved {stats['solved']}/{stats['attempted']} mazes "
                    f"in {format_duration(wall_clock_time)}")

        # Shuffled batches keep their (seeded) processing order
        if not args.shuffle:
            results.sort(key=lambda r: r['maze_file'])
        summary = create_result_summary(results)
        summary['batch_settings'] = {
            'input_path': str(args.input_path),
            'timeout': args.timeout,
            'threads': args.threads,
            'max_tasks': args.max_tasks,
            'shuffle': args.shuffle,
            'frontier': solver.search_config.frontier,
        }
        summary['solver_version'] = __version__
        summary['timestamp'] = time.time()
        summary['wall_clock_time'] = wall_clock_time

        if args.output:
            save_results({'summary': summary, 'results': results}, args.output)
            logger.info(f"Results saved to {args.output}")

        if not args.quiet:
            print_summary(summary)

        return 0 if summary['failed'] == 0 else 1

    except Exception as e:
        logger.error(f"Batch command failed: {e}")
        return 1


def config_command(args) -> int:
    """Show, validate or edit the configuration."""
    overrides = list(args.config or [])

    try:
        manager = ConfigManager()
        if args.config_action == 'show':
            manager.load_config(overrides=overrides)
            manager.print_config()
            return 0

        if args.config_action == 'validate':
            config = manager.load_config(overrides=overrides, validate=False)
            try:
                validate_config(config)
            except ConfigValidationError as e:
                print(f"Configuration validation failed: {e}")
                return 1
            for issue in check_config_consistency(config):
                logger.warning(issue)
            print("Configuration is valid")
            return 0

        if args.config_action == 'set':
            override = f"{args.key}={args.value}"
            try:
                manager.load_config(overrides=overrides + [override])
            except ConfigValidationError as e:
                print(f"Rejected {override}: {e}")
                return 1
            if args.output:
                manager.save_config(args.output)
            else:
                manager.print_config()
            print(f"{args.key} = {manager.get_parameter(args.key)}")
            return 0

        print("Unknown config action")
        return 1

    except Exception as e:
        logger.error(f"Config command failed: {e}")
        return 1
