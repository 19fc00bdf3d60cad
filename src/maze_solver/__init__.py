"""Heading-aware lowest-cost solver for text mazes.

Turning costs far more than stepping forward, so the search runs over
(position, heading) states rather than plain cells.
"""

__version__ = "0.1.0"
