"""Search over (position, heading) states.

This module implements the weighted transition model, the merge-insertion
frontier and the Dijkstra driver that ties them together.
"""

from .transitions import Transition, TransitionModel
from .frontier import (
    Frontier, LinkedFrontier, HeapFrontier, create_frontier, merge_insert, pop_min
)
from .dijkstra import (
    HeadingSearcher, SearchCancelledError, SearchConfig, SearchResult, SearchStatus,
    create_searcher, find_lowest_cost
)

__all__ = [
    'Transition',
    'TransitionModel',
    'Frontier',
    'LinkedFrontier',
    'HeapFrontier',
    'create_frontier',
    'merge_insert',
    'pop_min',
    'HeadingSearcher',
    'SearchCancelledError',
    'SearchConfig',
    'SearchResult',
    'SearchStatus',
    'create_searcher',
    'find_lowest_cost'
]
