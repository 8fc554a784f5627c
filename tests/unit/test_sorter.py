"""Unit tests for the topological sorter."""

import pytest

from makeshift.contexts.execution.sorter import topological_sort
from makeshift.exceptions import DependencyCycleError


@pytest.mark.unit
def test_chain_is_dependencies_first():
    assert topological_sort({"a": ["b"], "b": ["c"]}, "a") == ["c", "b", "a"]


@pytest.mark.unit
def test_diamond_visits_shared_dependency_once():
    graph = {"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []}

    assert topological_sort(graph, "a") == ["d", "b", "c", "a"]


@pytest.mark.unit
def test_every_target_follows_its_dependencies():
    graph = {
        "app": ["main.o", "util.o", "lib.a"],
        "main.o": ["main.c", "util.h"],
        "util.o": ["util.c", "util.h"],
        "lib.a": ["util.o", "extra.o"],
        "extra.o": ["extra.c"],
    }

    order = topological_sort(graph, "app")

    assert order[-1] == "app"
    assert len(order) == len(set(order))
    for target, dependencies in graph.items():
        for dependency in dependencies:
            assert order.index(dependency) < order.index(target)


@pytest.mark.unit
def test_only_reachable_targets_are_included():
    graph = {"a": ["b"], "b": [], "unrelated": ["a"]}

    assert topological_sort(graph, "a") == ["b", "a"]


@pytest.mark.unit
def test_files_without_rules_are_leaves():
    assert topological_sort({"app": ["main.c"]}, "app") == ["main.c", "app"]


@pytest.mark.unit
def test_repeated_dependency_listed_once():
    assert topological_sort({"a": ["b", "b"], "b": []}, "a") == ["b", "a"]


@pytest.mark.unit
def test_long_chain_does_not_hit_recursion_limit():
    depth = 20000
    graph = {f"t{i}": [f"t{i + 1}"] for i in range(depth)}

    order = topological_sort(graph, "t0")

    assert len(order) == depth + 1
    assert order[0] == f"t{depth}"
    assert order[-1] == "t0"


@pytest.mark.unit
def test_cycle_is_reported():
    graph = {"a": ["b"], "b": ["c"], "c": ["b"]}

    with pytest.raises(DependencyCycleError) as exc_info:
        topological_sort(graph, "a")

    assert exc_info.value.cycle == ["b", "c", "b"]


@pytest.mark.unit
def test_self_dependency_is_a_cycle():
    with pytest.raises(DependencyCycleError):
        topological_sort({"a": ["a"]}, "a")
