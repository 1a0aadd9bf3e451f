"""Tests for the shared graph traversal helpers."""

from __future__ import annotations

from campaigngraph import Location
from campaigngraph.traversal import find_cycle, index_by_id, walk_depth_first


def _neighbours(graph: dict[str, tuple[str, ...]]):
    return lambda node: graph.get(node, ())


def test_index_by_id_keeps_first_record_for_duplicate_ids() -> None:
    first = Location(id="a", name="First")
    second = Location(id="a", name="Second")

    index = index_by_id([first, second])

    assert index == {"a": first}


def test_walk_depth_first_yields_pre_order() -> None:
    graph = {"root": ("a", "b"), "a": ("a1", "a2"), "b": ("b1",)}

    order = list(walk_depth_first(["root"], _neighbours(graph)))

    assert order == ["root", "a", "a1", "a2", "b", "b1"]


def test_walk_depth_first_terminates_on_cycles() -> None:
    graph = {"a": ("b",), "b": ("c",), "c": ("a",)}

    order = list(walk_depth_first(["a"], _neighbours(graph)))

    assert order == ["a", "b", "c"]


def test_walk_depth_first_skips_excluded_ids() -> None:
    graph = {"a": ("b", "c"), "b": ("d",)}

    order = list(walk_depth_first(["a"], _neighbours(graph), exclude=("b",)))

    assert order == ["a", "c"]


def test_find_cycle_returns_path_of_cycle() -> None:
    graph = {"c": ("a",), "a": ("b",), "b": ("c",)}

    assert find_cycle("c", _neighbours(graph)) == ("c", "a", "b")


def test_find_cycle_reports_self_loop() -> None:
    assert find_cycle("a", _neighbours({"a": ("a",)})) == ("a",)


def test_find_cycle_returns_empty_tuple_for_acyclic_graph() -> None:
    graph = {"a": ("b", "c"), "b": ("d",), "c": ("d",), "d": ()}

    assert find_cycle("a", _neighbours(graph)) == ()


def test_find_cycle_detects_cycle_not_passing_through_start() -> None:
    graph = {"start": ("x",), "x": ("y",), "y": ("x",)}

    assert find_cycle("start", _neighbours(graph)) == ("x", "y")


def test_find_cycle_ignores_unknown_targets() -> None:
    assert find_cycle("a", _neighbours({"a": ("ghost",)})) == ()
