"""Unit tests for attaching values and the Bound accessor."""

import pytest

from obstree import (
    Bound,
    NotTrackedError,
    PrimitiveValueError,
    attach,
    detach,
    observable,
    resolve_node,
)
from tests.utils import assert_arena_matches_tree


@pytest.mark.unit
@pytest.mark.binding
def test_observable_tracks_every_reachable_container():
    tree = observable({"a": {"b": [1, {"c": 2}]}, "d": 3})

    assert_arena_matches_tree(tree)
    assert resolve_node(tree, tree.value["a"]["b"][1]) is tree.node("a", "b", 1)


@pytest.mark.unit
@pytest.mark.binding
@pytest.mark.parametrize("value", [1, "text", None, 2.5, (1, 2)])
def test_observable_rejects_primitives(value):
    with pytest.raises(PrimitiveValueError):
        observable(value)


@pytest.mark.unit
@pytest.mark.binding
def test_attach_rejects_primitives(nested_tree):
    node = nested_tree.node("a", "b", "c")

    with pytest.raises(PrimitiveValueError):
        attach(node, 1)
    with pytest.raises(TypeError):
        attach(node, "text")


@pytest.mark.unit
@pytest.mark.binding
def test_attach_is_idempotent(nested_tree):
    a = nested_tree.value["a"]
    before = nested_tree.arena.live

    first = attach(nested_tree.node("somewhere"), a)
    second = attach(nested_tree.node("a"), a)

    assert first == second
    assert nested_tree.arena.live == before
    assert resolve_node(nested_tree, a) is nested_tree.node("a")


@pytest.mark.unit
@pytest.mark.binding
def test_detach_releases_whole_subtree(nested_tree):
    a = nested_tree.value["a"]
    b = a["b"]

    detach(nested_tree, a)

    assert a not in nested_tree.arena
    assert b not in nested_tree.arena
    assert nested_tree.value in nested_tree.arena


@pytest.mark.unit
@pytest.mark.binding
def test_resolve_node_of_untracked_or_primitive_is_none(nested_tree):
    assert resolve_node(nested_tree, {"a": 1}) is None
    assert resolve_node(nested_tree, 1) is None


@pytest.mark.unit
@pytest.mark.binding
def test_bound_for_untracked_value_raises(nested_tree):
    with pytest.raises(NotTrackedError):
        nested_tree.bind({"not": "tracked"})
    with pytest.raises(NotTrackedError):
        Bound.for_value(nested_tree, 5)


@pytest.mark.unit
@pytest.mark.binding
def test_indexing_returns_value_bound_for_containers(nested_tree):
    a = nested_tree.root["a"]

    assert a.node is nested_tree.node("a")
    assert a.value is nested_tree.value["a"]
    assert a["b"].node is nested_tree.node("a", "b")


@pytest.mark.unit
@pytest.mark.binding
def test_prop_addresses_paths_that_do_not_exist_yet(nested_tree):
    future = nested_tree.root.prop("later")

    assert future.value is None
    future.set_value({"ready": True})

    assert nested_tree.value["later"] == {"ready": True}
    assert future.value == {"ready": True}
    assert future.node is nested_tree.node("later")


@pytest.mark.unit
@pytest.mark.binding
def test_bound_follows_value_not_path(nested_tree):
    """A value-bound accessor becomes stale once its value is replaced"""
    old_a = nested_tree.root["a"]

    nested_tree.root.set("a", {"b": {"c": 2}})

    assert old_a.is_stale
    with pytest.raises(NotTrackedError):
        old_a.set("b", 1)
    assert nested_tree.root["a"].value == {"b": {"c": 2}}


@pytest.mark.unit
@pytest.mark.binding
def test_stale_handle_never_resolves_to_a_reused_slot(nested_tree):
    old_b = nested_tree.root["a"]["b"]
    handle = nested_tree.arena.handle_of(nested_tree.value["a"]["b"])

    nested_tree.at("a").set("b", {"c": 9})

    assert nested_tree.arena.handle_of(nested_tree.value["a"]["b"]) == handle
    assert old_b.is_stale
    assert repr(old_b) == "Bound(<stale>)"


@pytest.mark.unit
@pytest.mark.binding
def test_tracking_does_not_change_user_data(nested_tree):
    assert nested_tree.value == {"a": {"b": {"c": 1}}}
    assert list(nested_tree.value["a"]) == ["b"]


@pytest.mark.unit
@pytest.mark.binding
def test_shared_container_is_tracked_at_its_first_path():
    shared = {"n": 1}
    tree = observable({"a": shared, "b": shared})

    assert resolve_node(tree, shared) is tree.node("a")
    assert tree.arena.live == 2

    tree.root.set("b", None)

    assert tree.value["a"] is shared
    assert resolve_node(tree, shared) is None
