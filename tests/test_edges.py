"""Tests for edge path parsing."""

from vent.core.edges import EdgePath, flatten_edge_paths, parse_edge_paths


def names(tree: list[EdgePath]) -> set[str]:
    return {node.name for node in tree}


def test_empty_input():
    assert parse_edge_paths([]) == []


def test_single_leaf():
    assert parse_edge_paths(["groups"]) == [EdgePath("groups")]


def test_nested_path():
    tree = parse_edge_paths(["groups__permissions"])
    assert tree == [EdgePath("groups", (EdgePath("permissions"),))]


def test_deep_nesting():
    tree = parse_edge_paths(["a__b__c"])
    assert tree[0].child("b").child("c") == EdgePath("c")


def test_shared_prefix_is_merged():
    tree = parse_edge_paths(["posts__author", "posts__comments"])
    assert len(tree) == 1
    assert names(tree[0].children) == {"author", "comments"}


def test_leaf_and_nested_for_same_edge_merge():
    tree = parse_edge_paths(["groups", "groups__permissions"])
    assert len(tree) == 1
    assert tree[0].child("permissions") is not None


def test_conflicting_nested_children_are_merged():
    tree = parse_edge_paths(["a__b__c", "a__b__d", "a__e"])
    node = tree[0]
    assert names(node.children) == {"b", "e"}
    assert names(node.child("b").children) == {"c", "d"}


def test_distinct_top_level_edges():
    tree = parse_edge_paths(["groups", "posts__author"])
    assert names(tree) == {"groups", "posts"}
    assert tree[0].children == ()


def test_order_is_first_seen():
    tree = parse_edge_paths(["posts", "groups", "posts__author"])
    assert [node.name for node in tree] == ["posts", "groups"]


def test_flatten_round_trip():
    paths = ["groups__permissions", "posts__author__groups"]
    flat = flatten_edge_paths(parse_edge_paths(paths))
    assert set(paths) <= set(flat)
    assert "posts__author" in flat
    assert set(flatten_edge_paths(parse_edge_paths(flat))) == set(flat)


def test_str_joins_flat_paths():
    node = EdgePath("groups", (EdgePath("permissions"),))
    assert str(node) == "groups, groups__permissions"


def test_child_missing_is_none():
    assert EdgePath("groups").child("permissions") is None


def test_leaf_nested_and_sibling():
    tree = parse_edge_paths(["a", "a__b", "c"])
    assert tree == [EdgePath("a", (EdgePath("b"),)), EdgePath("c")]
