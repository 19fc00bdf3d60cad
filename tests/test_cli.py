"""Tests for CLI interface."""

import pytest
import tempfile
import json
import random
import shutil
from pathlib import Path
from unittest.mock import patch

from maze_solver.cli.main import main_cli, create_parser
from maze_solver.cli.utils import (
    save_results, find_maze_files, format_duration, ProgressReporter, create_result_summary
)
from maze_solver.cli.commands import MazeSolver
from maze_solver.integration.io import MazeParseError


FOUR_BY_FOUR = "S...\n###.\n....\n...E\n"
ENCLOSED_END = "S....\n..###\n..#E#\n..###\n"
RAGGED = "S..\n..\n..E\n"


@pytest.fixture
def temp_dir():
    """Create temporary directory."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def maze_file(temp_dir):
    path = temp_dir / "four.txt"
    path.write_text(FOUR_BY_FOUR)
    return path


class TestCLIParser:
    """Test CLI argument parsing."""

    def test_create_parser(self):
        parser = create_parser()
        assert parser.prog == 'maze-solver'

    def test_solve_command_parsing(self):
        parser = create_parser()

        args = parser.parse_args(['solve', 'maze.txt'])
        assert args.command == 'solve'
        assert args.maze_file == 'maze.txt'
        assert args.timeout is None
        assert args.max_nodes is None
        assert args.frontier is None
        assert args.show_path is False

        args = parser.parse_args([
            'solve', 'maze.txt',
            '--timeout', '60',
            '--max-nodes', '500',
            '--max-cost', '9000',
            '--frontier', 'heap',
            '--show-path'
        ])
        assert args.timeout == 60.0
        assert args.max_nodes == 500
        assert args.max_cost == 9000
        assert args.frontier == 'heap'
        assert args.show_path is True

    def test_unknown_frontier_rejected(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(['solve', 'maze.txt', '--frontier', 'fibonacci'])

    def test_batch_command_parsing(self):
        parser = create_parser()

        args = parser.parse_args(['batch', 'mazes/'])
        assert args.command == 'batch'
        assert args.input_path == 'mazes/'
        assert args.threads == 1
        assert args.report_interval == 10

        args = parser.parse_args([
            'batch', 'mazes/',
            '--timeout', '45',
            '--threads', '4',
            '--max-tasks', '100',
            '--shuffle'
        ])
        assert args.timeout == 45.0
        assert args.threads == 4
        assert args.max_tasks == 100
        assert args.shuffle is True

    def test_batch_shares_search_options(self):
        args = create_parser().parse_args(['batch', 'mazes/', '--frontier', 'heap', '--max-nodes', '50'])
        assert args.frontier == 'heap'
        assert args.max_nodes == 50
        assert args.max_cost is None

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['--version'])
        assert "maze-solver 0.1.0" in capsys.readouterr().out

    def test_config_command_parsing(self):
        parser = create_parser()

        args = parser.parse_args(['config', 'show'])
        assert args.command == 'config'
        assert args.config_action == 'show'

        args = parser.parse_args(['config', 'set', 'search.costs.turn', '500'])
        assert args.config_action == 'set'
        assert args.key == 'search.costs.turn'
        assert args.value == '500'

    def test_global_options(self):
        parser = create_parser()

        args = parser.parse_args([
            '-vv', '-c', 'search.frontier=heap', '-c', 'search.costs.turn=10',
            '-o', 'out.json', 'solve', 'maze.txt'
        ])
        assert args.verbose == 2
        assert args.config == ['search.frontier=heap', 'search.costs.turn=10']
        assert args.output == 'out.json'
        assert args.quiet is False


class TestCLIUtils:
    """Test CLI utility functions."""

    def test_save_results(self, temp_dir):
        output_file = temp_dir / "nested" / "results.json"
        save_results({'cost': 1006, 'status': 'found'}, output_file)

        with open(output_file) as f:
            assert json.load(f) == {'cost': 1006, 'status': 'found'}

    def test_find_maze_files_directory(self, temp_dir):
        for name in ["b.txt", "a.txt", "notes.md"]:
            (temp_dir / name).write_text(FOUR_BY_FOUR)

        files = find_maze_files(temp_dir)
        assert [f.name for f in files] == ["a.txt", "b.txt"]

    def test_find_maze_files_with_limit(self, temp_dir):
        for i in range(5):
            (temp_dir / f"maze_{i}.txt").write_text(FOUR_BY_FOUR)
        assert len(find_maze_files(temp_dir, max_files=3)) == 3

    def test_find_maze_files_single_file(self, maze_file):
        assert find_maze_files(maze_file) == [maze_file]

    def test_find_maze_files_list(self, temp_dir, maze_file):
        listing = temp_dir / "mazes.lst"
        listing.write_text(f"{maze_file}\n\n{maze_file}\n")
        assert find_maze_files(listing) == [maze_file, maze_file]

    def test_find_maze_files_missing(self):
        with pytest.raises(FileNotFoundError):
            find_maze_files("/nonexistent/path")

    def test_format_duration(self):
        assert format_duration(0.0005) == "500.0µs"
        assert format_duration(0.25) == "250.0ms"
        assert format_duration(5.5) == "5.50s"
        assert format_duration(125) == "2m 5.0s"
        assert format_duration(3725) == "1h 2m 5.0s"

    def test_progress_reporter(self, capsys):
        reporter = ProgressReporter(total_mazes=4, report_interval=2)
        reporter.update('found')
        assert capsys.readouterr().out == ""

        reporter.update('exhausted')
        out = capsys.readouterr().out
        assert "Progress: 2/4" in out
        assert "Solved: 1" in out
        assert "No path: 1" in out
        assert reporter.completed == 2

    def test_create_result_summary(self):
        results = [
            {'status': 'found', 'computation_time': 1.0},
            {'status': 'found', 'computation_time': 3.0},
            {'status': 'exhausted', 'computation_time': 2.0},
            {'status': 'cancelled', 'computation_time': 4.0},
            {'status': 'error', 'computation_time': 0.0},
        ]
        summary = create_result_summary(results)

        assert summary['total_mazes'] == 5
        assert summary['solved'] == 2
        assert summary['unreachable'] == 1
        assert summary['cancelled'] == 1
        assert summary['failed'] == 1
        assert summary['success_rate'] == pytest.approx(0.4)
        assert summary['median_time'] == 2.0
        assert summary['total_time'] == 10.0
        assert summary['min_time'] == 0.0
        assert summary['max_time'] == 4.0

    def test_create_result_summary_empty(self):
        summary = create_result_summary([])
        assert summary['total_mazes'] == 0
        assert summary['success_rate'] == 0.0


class TestMazeSolver:
    """Test the configured solver facade."""

    def test_solve_text(self):
        solver = MazeSolver()
        result = solver.solve_text(FOUR_BY_FOUR, maze_id="four")

        assert result['maze_id'] == "four"
        assert result['success'] is True
        assert result['status'] == 'found'
        assert result['cost'] == 1006
        assert result['path'] is None
        assert result['search_stats']['state_space_size'] == 64
        assert result['search_stats']['termination_reason'] == 'goal_reached'

    def test_solve_text_does_not_count(self):
        solver = MazeSolver()
        result = solver.solve_text(FOUR_BY_FOUR)
        assert solver.get_stats()['attempted'] == 0

        solver.record(result)
        solver.record(solver.solve_text(ENCLOSED_END))
        stats = solver.get_stats()
        assert stats['attempted'] == 2
        assert stats['solved'] == 1

    def test_rng_seeded_in_deterministic_mode(self):
        overrides = ["development.testing.deterministic_mode=true",
                     "development.testing.random_seed=7"]
        first = MazeSolver(overrides).rng.random()
        second = MazeSolver(overrides).rng.random()
        assert first == second == random.Random(7).random()

    def test_solve_file_rejects_undecodable_bytes(self, temp_dir):
        path = temp_dir / "binary.txt"
        path.write_bytes(b"S\xff\xfeE")
        with pytest.raises(MazeParseError):
            MazeSolver().solve_file(path)

    def test_solve_text_with_path(self):
        solver = MazeSolver(["search.track_paths=true"])
        result = solver.solve_text(FOUR_BY_FOUR)

        assert result['path'][0] == {'x': 0, 'y': 0, 'dir': 'right'}
        assert result['rendered'] == "S>>>\n###v\n...v\n...E"

    def test_solve_unreachable(self):
        result = MazeSolver().solve_text(ENCLOSED_END)
        assert result['success'] is False
        assert result['status'] == 'exhausted'
        assert result['cost'] is None

    def test_config_overrides_apply(self):
        solver = MazeSolver(["search.costs.turn=10", "search.frontier=heap"])
        assert solver.search_config.turn_cost == 10
        assert solver.solve_text(FOUR_BY_FOUR)['cost'] == 16

    def test_custom_alphabet(self):
        solver = MazeSolver(["grid.wall_char=X", "grid.initial_heading=down"])
        # Facing down, the first move is a plain step
        assert solver.solve_text("S.\n.E")['cost'] == 1002
        assert solver.solve_text("SX\n.E")['cost'] == 1002

    def test_solve_file_missing(self):
        with pytest.raises(FileNotFoundError):
            MazeSolver().solve_file("/nonexistent/maze.txt")

    def test_solve_malformed(self):
        with pytest.raises(MazeParseError):
            MazeSolver().solve_text(RAGGED)


class TestMainCLI:
    """Test main CLI function."""

    def test_main_cli_no_command(self):
        assert main_cli([]) == 1

    def test_main_cli_help(self):
        with pytest.raises(SystemExit):
            main_cli(['--help'])

    def test_solve_prints_cost(self, maze_file, capsys):
        assert main_cli(['solve', str(maze_file)]) == 0
        assert capsys.readouterr().out.strip() == "1006"

    def test_solve_with_heap_frontier(self, maze_file, capsys):
        assert main_cli(['solve', str(maze_file), '--frontier', 'heap']) == 0
        assert capsys.readouterr().out.strip() == "1006"

    def test_solve_show_path(self, maze_file, capsys):
        assert main_cli(['solve', str(maze_file), '--show-path']) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines == ["1006", "S>>>", "###v", "...v", "...E"]

    def test_solve_no_path(self, temp_dir, capsys):
        path = temp_dir / "enclosed.txt"
        path.write_text(ENCLOSED_END)

        assert main_cli(['solve', str(path)]) == 0
        assert capsys.readouterr().out.strip() == "no path"

    def test_solve_cancelled(self, maze_file, capsys):
        assert main_cli(['solve', str(maze_file), '--max-nodes', '1']) == 1
        assert capsys.readouterr().out.strip() == "cancelled (node_limit)"

    def test_solve_writes_json(self, maze_file, temp_dir):
        output = temp_dir / "result.json"
        assert main_cli(['-o', str(output), 'solve', str(maze_file), '--show-path']) == 0

        with open(output) as f:
            data = json.load(f)
        assert data['cost'] == 1006
        assert data['status'] == 'found'
        assert data['maze_file'] == str(maze_file)
        assert data['path'][-1] == {'x': 3, 'y': 3, 'dir': 'down'}

    def test_solve_missing_file(self):
        assert main_cli(['solve', '/nonexistent/maze.txt']) == 1

    def test_solve_malformed_file(self, temp_dir):
        path = temp_dir / "bad.txt"
        path.write_text(RAGGED)
        assert main_cli(['solve', str(path)]) == 1

    def test_batch(self, temp_dir):
        (temp_dir / "a_four.txt").write_text(FOUR_BY_FOUR)
        (temp_dir / "b_enclosed.txt").write_text(ENCLOSED_END)
        output = temp_dir / "out" / "batch.json"

        assert main_cli(['-q', '-o', str(output), 'batch', str(temp_dir), '--threads', '2']) == 0

        with open(output) as f:
            data = json.load(f)
        summary = data['summary']
        assert summary['total_mazes'] == 2
        assert summary['solved'] == 1
        assert summary['unreachable'] == 1
        assert summary['failed'] == 0
        assert [r['cost'] for r in data['results']] == [1006, None]

    def test_batch_with_malformed_maze(self, temp_dir):
        (temp_dir / "good.txt").write_text(FOUR_BY_FOUR)
        (temp_dir / "bad.txt").write_text(RAGGED)
        output = temp_dir / "batch.json"

        assert main_cli(['-q', '-o', str(output), 'batch', str(temp_dir)]) == 1

        with open(output) as f:
            data = json.load(f)
        assert data['summary']['failed'] == 1
        statuses = {Path(r['maze_file']).name: r['status'] for r in data['results']}
        assert statuses == {'bad.txt': 'error', 'good.txt': 'found'}

    @pytest.mark.parametrize("threads", ['1', '3'])
    def test_batch_with_undecodable_maze(self, temp_dir, threads):
        (temp_dir / "a.txt").write_text("S.E")
        (temp_dir / "b.txt").write_bytes(b"S\xff\xfeE")
        (temp_dir / "c.txt").write_text("S..E")
        output = temp_dir / "batch.json"

        assert main_cli(['-q', '-o', str(output), 'batch', str(temp_dir), '--threads', threads]) == 1

        with open(output) as f:
            data = json.load(f)
        assert data['summary']['failed'] == 1
        outcomes = [(Path(r['maze_file']).name, r['status'], r['cost']) for r in data['results']]
        assert outcomes == [('a.txt', 'found', 2), ('b.txt', 'error', None), ('c.txt', 'found', 3)]
        assert "not valid UTF-8" in data['results'][1]['error']

    @pytest.mark.parametrize("threads", ['1', '4'])
    def test_batch_shuffle_is_reproducible(self, temp_dir, threads):
        maze_dir = temp_dir / "mazes"
        maze_dir.mkdir()
        names = [f"m{i:02d}.txt" for i in range(12)]
        for i, name in enumerate(names):
            (maze_dir / name).write_text("S" + "." * i + "E")

        def run(output):
            argv = ['-q', '-o', str(output),
                    '-c', 'development.testing.deterministic_mode=true',
                    '-c', 'development.testing.random_seed=42',
                    'batch', str(maze_dir), '--shuffle', '--threads', threads]
            assert main_cli(argv) == 0
            with open(output) as f:
                return [Path(r['maze_file']).name for r in json.load(f)['results']]

        first = run(temp_dir / "first.json")
        second = run(temp_dir / "second.json")

        expected = list(names)
        random.Random(42).shuffle(expected)
        assert first == second == expected

    def test_batch_counts_every_maze(self, temp_dir):
        for i in range(8):
            (temp_dir / f"m{i}.txt").write_text(FOUR_BY_FOUR if i % 2 else ENCLOSED_END)
        stats = {}
        original_init = MazeSolver.__init__

        def capture(self, *args, **kwargs):
            original_init(self, *args, **kwargs)
            stats['solver'] = self

        with patch.object(MazeSolver, '__init__', capture):
            assert main_cli(['-q', 'batch', str(temp_dir), '--threads', '4']) == 0

        assert stats['solver'].get_stats()['attempted'] == 8
        assert stats['solver'].get_stats()['solved'] == 4

    def test_batch_empty_directory(self, temp_dir):
        assert main_cli(['batch', str(temp_dir)]) == 1

    def test_config_show(self, capsys):
        assert main_cli(['-c', 'search.frontier=heap', 'config', 'show']) == 0
        out = capsys.readouterr().out
        assert "Current Configuration:" in out
        assert "frontier: heap" in out

    def test_config_validate(self, capsys):
        assert main_cli(['config', 'validate']) == 0
        assert "Configuration is valid" in capsys.readouterr().out

    def test_config_validate_failure(self, capsys):
        assert main_cli(['-c', 'search.costs.step=-1', 'config', 'validate']) == 1
        assert "Configuration validation failed" in capsys.readouterr().out

    def test_config_set(self, capsys):
        assert main_cli(['config', 'set', 'search.costs.turn', '500']) == 0
        out = capsys.readouterr().out
        assert "turn: 500" in out
        assert out.strip().endswith("search.costs.turn = 500")

    def test_config_set_saves(self, temp_dir):
        output = temp_dir / "config.yaml"
        assert main_cli(['-o', str(output), 'config', 'set', 'search.frontier', 'heap']) == 0
        assert "frontier: heap" in output.read_text()

    def test_config_set_rejected(self, capsys):
        assert main_cli(['config', 'set', 'search.costs.turn', '-5']) == 1
        assert "Rejected search.costs.turn=-5" in capsys.readouterr().out

    @patch('maze_solver.cli.commands.solve_command')
    def test_main_cli_dispatches_solve(self, mock_solve):
        mock_solve.return_value = 0
        assert main_cli(['solve', 'maze.txt']) == 0
        mock_solve.assert_called_once()

    @patch('maze_solver.cli.commands.batch_command')
    def test_main_cli_keyboard_interrupt(self, mock_batch):
        mock_batch.side_effect = KeyboardInterrupt
        assert main_cli(['batch', 'mazes/']) == 130
