"""Layered tombstone search: tree model, per-depth constraint evaluation, and the prune/expand driver."""

from .model import Variable, Node, Root, SearchConfig
from .ordering import Ordering, natural_ordering, most_constrained_ordering
from .constraints import Constraint, LayeredEvaluator
from .paths import enumerate_paths, is_complete, is_live
from .search_core import search
from .parser import parse_constraint

__all__ = [
    "Variable",
    "Node",
    "Root",
    "SearchConfig",
    "Ordering",
    "natural_ordering",
    "most_constrained_ordering",
    "Constraint",
    "LayeredEvaluator",
    "enumerate_paths",
    "is_complete",
    "is_live",
    "search",
    "parse_constraint",
]
