"""Layered search driver: prune the frontier, then grow it by one variable layer."""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional, Sequence

from .constraints import LayeredEvaluator
from .model import Root, SearchConfig
from .paths import format_path, is_complete, iter_paths, path_values
from src.utils.trace import Tracer, get_tracer

PathCheck = Callable[[Sequence[int]], bool]


def search(config: SearchConfig, evaluator: PathCheck, tracer: Optional[Tracer] = None) -> Root:
    """
    Build the full search tree for `config`. The returned root holds every
    explored path; complete paths ending in a live node are the solutions.
    An unsatisfiable constraint set simply leaves no live complete path.
    """
    root = None
    for root in iter_search(config, evaluator, tracer):
        pass
    return root


def iter_search(
    config: SearchConfig, evaluator: PathCheck, tracer: Optional[Tracer] = None
) -> Iterator[Root]:
    """Run the search, yielding the root after each depth has been pruned."""
    tracer = tracer or get_tracer()
    root = Root.create(config)
    while True:
        prune(root, evaluator, tracer)
        yield root
        if root.at_max_depth:
            break
        increase_search_depth(root, tracer)

    live = sum(
        1 for path in iter_paths(root)
        if is_complete(path, root.max_depth) and not path[-1].dead
    )
    tracer.log_search_complete(depth=root.depth, live_paths=live, reason=config.ordering.name)


def generate_tree(root: Root, evaluator: PathCheck, tracer: Optional[Tracer] = None) -> None:
    """One search step: tombstone failing frontier nodes, then add the next layer."""
    prune(root, evaluator, tracer)
    increase_search_depth(root, tracer)


def prune(root: Root, evaluator: PathCheck, tracer: Optional[Tracer] = None) -> int:
    """
    Evaluate every path that ends in a live frontier node and tombstone the
    terminal node of each failing path. Returns the number of nodes marked.
    """
    tracer = tracer or get_tracer()
    checked = 0
    marked = 0
    for path in iter_paths(root):
        terminal = path[-1]
        if not terminal.is_frontier():
            continue
        checked += 1
        values = path_values(path)
        reason = _failure_reason(evaluator, values)
        if reason is None:
            continue
        terminal.mark_dead()
        marked += 1
        tracer.log_constraint_fail(depth=len(path), path=format_path(path), constraint_desc=reason)

    tracer.log_prune(depth=root.depth, nodes_checked=checked, nodes_marked=marked)
    return marked


def increase_search_depth(root: Root, tracer: Optional[Tracer] = None) -> int:
    """
    Add the next variable of the ordering under every live frontier node.
    Does nothing once the tree is at maximum depth. Returns nodes created.
    """
    if root.at_max_depth:
        return 0
    tracer = tracer or get_tracer()

    frontier_nodes = [node for node in root.walk() if node.is_frontier()]
    root.depth += 1
    letter = root.config.letter_at(root.depth)
    added = 0
    for node in frontier_nodes:
        added += len(node.add_variable_layer(letter, root.config.domain_size))

    tracer.log_expand(
        depth=root.depth,
        variable=letter,
        nodes_expanded=len(frontier_nodes),
        nodes_added=added,
    )
    return added


def _failure_reason(evaluator: PathCheck, values: Sequence[int]) -> Optional[str]:
    if isinstance(evaluator, LayeredEvaluator):
        failed = evaluator.failing_constraint(values)
        return failed.description if failed is not None else None
    return None if evaluator(values) else "rejected by evaluator"


@dataclass
class SearchStats:
    total_nodes: int = 0
    dead_nodes: int = 0
    total_paths: int = 0
    complete_live_paths: int = 0
    dead_by_depth: Dict[int, int] = field(default_factory=dict)


def collect_stats(root: Root) -> SearchStats:
    stats = SearchStats(total_nodes=root.node_count())
    for path in iter_paths(root):
        stats.total_paths += 1
        terminal = path[-1]
        if terminal.dead:
            stats.dead_nodes += 1
            stats.dead_by_depth[len(path)] = stats.dead_by_depth.get(len(path), 0) + 1
        elif is_complete(path, root.max_depth):
            stats.complete_live_paths += 1
    stats.dead_by_depth = dict(sorted(stats.dead_by_depth.items()))
    return stats
