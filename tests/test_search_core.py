"""Tests for the prune/expand search driver."""

import pytest

from src.layersearch import search_core
from src.layersearch.constraints import Constraint, LayeredEvaluator
from src.layersearch.model import Root, SearchConfig
from src.layersearch.ordering import Ordering
from src.layersearch.paths import enumerate_paths, frontier, is_complete, path_values
from src.utils.trace import Tracer


def _config(letters, domain_size=4):
    return SearchConfig(ordering=Ordering("test", tuple(letters)), domain_size=domain_size)


def _no_constraints(config):
    return LayeredEvaluator(ordering=config.ordering)


@pytest.fixture
def tracer():
    return Tracer(enabled=True)


@pytest.mark.parametrize("depth", [1, 2, 3, 4, 5])
def test_unconstrained_layer_has_four_to_the_depth_nodes(depth, tracer):
    config = _config("ABCDE"[:depth])
    root = search_core.search(config, _no_constraints(config), tracer)

    assert root.depth == depth
    assert len(root.nodes_at_depth(depth)) == 4 ** depth
    assert root.node_count() == sum(4 ** d for d in range(1, depth + 1))


def test_single_variable_without_constraints(tracer):
    config = _config("A")
    root = search_core.search(config, _no_constraints(config), tracer)
    paths = enumerate_paths(root)

    assert len(paths) == 4
    assert all(is_complete(p, root.max_depth) and not p[-1].dead for p in paths)


def test_two_variables_must_differ(tracer):
    config = _config("AB")
    evaluator = LayeredEvaluator.from_constraints([Constraint.not_equal("A", "B")], config.ordering)
    root = search_core.search(config, evaluator, tracer)
    paths = enumerate_paths(root)

    assert len(paths) == 16
    dead = [path_values(p) for p in paths if p[-1].dead]
    live = [path_values(p) for p in paths if not p[-1].dead]
    assert dead == [[1, 1], [2, 2], [3, 3], [4, 4]]
    assert len(live) == 12
    assert [1, 2] in live and [1, 3] in live and [1, 4] in live

    stats = search_core.collect_stats(root)
    assert stats.total_nodes == 20
    assert stats.dead_nodes == 4
    assert stats.complete_live_paths == 12
    assert stats.dead_by_depth == {2: 4}


def test_dead_nodes_are_never_expanded(tracer):
    config = _config("ABCD")
    evaluator = LayeredEvaluator.from_constraints(
        [Constraint.all_diff(["A", "B"]), Constraint.all_diff(["A", "B", "C"]), Constraint.not_equal("C", "D")],
        config.ordering,
    )
    root = Root.create(config)
    while True:
        search_core.prune(root, evaluator, tracer)
        for node in root.walk():
            if node.dead:
                assert node.children == []
        if root.at_max_depth:
            break
        search_core.increase_search_depth(root, tracer)
        for node in root.walk():
            if node.dead:
                assert node.children == []


def test_pruning_never_grows_the_frontier(tracer):
    config = _config("ABC")
    evaluator = LayeredEvaluator.from_constraints(
        [Constraint.not_equal("A", "B"), Constraint.not_equal("B", "C")], config.ordering
    )
    root = Root.create(config)
    while True:
        before = len(frontier(root))
        search_core.prune(root, evaluator, tracer)
        assert len(frontier(root)) <= before
        if root.at_max_depth:
            break
        search_core.increase_search_depth(root, tracer)


def test_pruning_twice_marks_nothing_new(tracer):
    config = _config("AB")
    evaluator = LayeredEvaluator.from_constraints([Constraint.not_equal("A", "B")], config.ordering)
    root = Root.create(config)
    search_core.generate_tree(root, evaluator, tracer)

    assert search_core.prune(root, evaluator, tracer) == 4
    assert search_core.prune(root, evaluator, tracer) == 0


def test_expansion_stops_at_max_depth(tracer):
    config = _config("AB")
    root = Root.create(config)
    assert search_core.increase_search_depth(root, tracer) == 16
    assert search_core.increase_search_depth(root, tracer) == 0
    assert root.depth == 2
    assert root.node_count() == 20


def test_expansion_binds_next_variable_of_ordering(tracer):
    config = _config("HFG")
    root = search_core.search(config, _no_constraints(config), tracer)
    for path in enumerate_paths(root):
        assert [n.letter for n in path] == ["H", "F", "G"]


def test_plain_callable_evaluator(tracer):
    config = _config("ABCD")

    def _all_different(values):
        return len(set(values)) == len(values)

    root = search_core.search(config, _all_different, tracer)
    stats = search_core.collect_stats(root)
    assert stats.complete_live_paths == 24


def test_unsatisfiable_constraints_leave_no_live_path(tracer):
    config = _config("AB", domain_size=2)
    evaluator = LayeredEvaluator.from_constraints(
        [Constraint(description="A + B > 4", scope=["A", "B"], predicate=lambda a: a["A"] + a["B"] > 4)],
        config.ordering,
    )
    root = search_core.search(config, evaluator, tracer)
    assert search_core.collect_stats(root).complete_live_paths == 0


def test_search_is_traced(tracer):
    config = _config("AB")
    evaluator = LayeredEvaluator.from_constraints([Constraint.not_equal("A", "B")], config.ordering)
    search_core.search(config, evaluator, tracer)

    summary = tracer.summary()
    assert summary["action_counts"] == {
        "prune": 2,
        "expand": 1,
        "constraint_fail": 4,
        "search_complete": 1,
    }
    assert summary["nodes_pruned"] == 4
    assert summary["nodes_created"] == 16
    fail = next(s for s in tracer.steps if s.action_type == "constraint_fail")
    assert fail.path == "[A:1 B:1]"
    assert fail.constraint_checked == "A != B"


def test_iter_search_yields_once_per_depth(tracer):
    config = _config("ABC")
    depths = [root.depth for root in search_core.iter_search(config, _no_constraints(config), tracer)]
    assert depths == [1, 2, 3]
