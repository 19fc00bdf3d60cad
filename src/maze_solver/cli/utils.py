"""CLI utility functions."""

import json
import logging
import statistics
import time
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


def setup_logging(level: int = logging.INFO,
                  format_string: Optional[str] = None) -> None:
    """Configure root logging; debug output also shows timestamps and logger names."""
    if format_string is None:
        if level <= logging.DEBUG:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_string = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=format_string, datefmt="%H:%M:%S")


def save_results(results: Dict[str, Any],
                 output_path: Union[str, Path],
                 pretty: bool = True) -> None:
    """Write results as JSON, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2 if pretty else None, sort_keys=pretty)


def find_maze_files(input_path: Union[str, Path],
                    max_files: Optional[int] = None,
                    pattern: str = "*.txt") -> List[Path]:
    """Resolve a batch input into maze file paths.

    Args:
        input_path: A directory (searched recursively for ``pattern``), a
            ``.lst`` file with one path per line, or a single maze file
        max_files: Keep only the first ``max_files`` paths

    Raises:
        FileNotFoundError: If ``input_path`` does not exist
    """
    input_path = Path(input_path)

    if input_path.is_dir():
        maze_files = sorted(input_path.rglob(pattern))
    elif input_path.is_file() and input_path.suffix.lower() == '.lst':
        lines = input_path.read_text().splitlines()
        maze_files = [Path(line.strip()) for line in lines if line.strip()]
    elif input_path.is_file():
        maze_files = [input_path]
    else:
        raise FileNotFoundError(f"Input path not found: {input_path}")

    return maze_files[:max_files] if max_files else maze_files


def format_duration(seconds: float) -> str:
    """Human-readable duration: µs, ms, s, then ``Xm Ys`` and ``Xh Ym Zs``."""
    if seconds < 0.001:
        return f"{seconds * 1e6:.1f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.1f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"

    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m {secs:.1f}s"
    hours, minutes = divmod(int(minutes), 60)
    return f"{hours}h {minutes}m {secs:.1f}s"


class ProgressReporter:
    """Prints a progress line every ``report_interval`` finished mazes."""

    def __init__(self, total_mazes: int, report_interval: int = 10):
        self.total_mazes = total_mazes
        self.report_interval = max(1, report_interval)
        self.counts: Counter = Counter()
        self.start_time = time.perf_counter()

    @property
    def completed(self) -> int:
        return sum(self.counts.values())

    def update(self, status: str) -> None:
        """Record one finished maze by its result status."""
        self.counts[status] += 1
        if self.completed % self.report_interval == 0 or self.completed == self.total_mazes:
            self._report_progress()

    def _report_progress(self) -> None:
        done = self.completed
        elapsed = time.perf_counter() - self.start_time
        rate = done / elapsed if elapsed > 0 else 0.0
        eta = (self.total_mazes - done) / rate if rate > 0 else 0.0

        print(f"Progress: {done}/{self.total_mazes} ({done / self.total_mazes:.0%}) | "
              f"Solved: {self.counts['found']} | No path: {self.counts['exhausted']} | "
              f"Rate: {rate:.1f} mazes/s | ETA: {format_duration(eta)}")


def create_result_summary(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Counts per outcome and timing statistics for a batch.

    Outcomes are the search statuses ``found``, ``exhausted`` and
    ``cancelled``, plus ``error`` for mazes that failed to load.
    """
    statuses = Counter(r.get('status') for r in results)
    times = [r.get('computation_time', 0.0) for r in results]
    total = len(results)

    return {
        'total_mazes': total,
        'solved': statuses['found'],
        'unreachable': statuses['exhausted'],
        'cancelled': statuses['cancelled'],
        'failed': statuses['error'],
        'success_rate': statuses['found'] / total if total else 0.0,
        'average_time': statistics.mean(times) if times else 0.0,
        'median_time': statistics.median(times) if times else 0.0,
        'total_time': sum(times),
        'min_time': min(times, default=0.0),
        'max_time': max(times, default=0.0),
    }


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a batch summary table."""
    rows = [
        ("Total mazes", summary['total_mazes']),
        ("Solved", f"{summary['solved']} ({summary['success_rate']:.1%})"),
        ("No path", summary['unreachable']),
        ("Cancelled", summary['cancelled']),
        ("Failed", summary['failed']),
    ]
    timings = [
        (label, format_duration(summary[key]))
        for label, key in [("Total time", 'total_time'), ("Average time", 'average_time'),
                           ("Median time", 'median_time'), ("Min time", 'min_time'),
                           ("Max time", 'max_time')]
    ]

    print("\n" + "=" * 60)
    print("BATCH SUMMARY")
    print("=" * 60)
    for label, value in rows:
        print(f"{label + ':':<18}{value}")
    print("\nTiming:")
    for label, value in timings:
        print(f"{label + ':':<18}{value}")
