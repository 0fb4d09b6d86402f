"""Top-level search interface.

Expose `solve_puzzle(puzzle, ordering)` that accepts either a pre-built
PuzzleDefinition or a raw puzzle dictionary compatible with
`src.layersearch.loader.parse_record`.
"""

from typing import Any, Optional

from src.layersearch import search_core
from src.layersearch.loader import parse_record
from src.layersearch.model import Root
from src.layersearch.puzzle import NATURAL, PuzzleDefinition
from src.utils.trace import Tracer


def solve_puzzle(puzzle: Any, ordering: str = NATURAL, tracer: Optional[Tracer] = None) -> Root:
    """
    Run the layered search for a puzzle and return the finished tree.
    Accepts:
      - PuzzleDefinition instances (used directly)
      - Raw puzzle dictionaries (parsed via `parse_record`)
    """
    if isinstance(puzzle, PuzzleDefinition):
        definition = puzzle
    elif isinstance(puzzle, dict):
        definition = parse_record(puzzle)
    else:
        raise TypeError("solve_puzzle expects a PuzzleDefinition or puzzle dictionary")

    config = definition.config_for(ordering)
    evaluator = definition.evaluator_for(ordering)
    return search_core.search(config, evaluator, tracer)


__all__ = ["solve_puzzle"]
