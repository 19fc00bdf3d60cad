"""Module entry point.

Delegates to the CLI at `maze_solver.cli.main`. Prefer invoking the console
script `maze-solver`.
"""

from maze_solver.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
