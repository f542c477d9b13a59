"""Unit tests for notification bubbling and listener filtering."""

import pytest

from obstree import (
    NotificationDepthError,
    configure_observable,
    observable,
    register_listener,
    unregister,
)
from tests.utils import Recorder


@pytest.mark.unit
@pytest.mark.notify
def test_shallow_listener_ignores_changes_two_levels_down(nested_tree):
    shallow, deep, leaf = Recorder(), Recorder(), Recorder()
    nested_tree.at("a").on_change_shallow(shallow)
    nested_tree.at("a").on_change(deep)
    nested_tree.at("a", "b", "c").on_change(leaf)

    nested_tree.at("a", "b").set("c", 2)

    assert leaf.count == 1
    assert deep.count == 1
    assert shallow.count == 0


@pytest.mark.unit
@pytest.mark.notify
def test_shallow_listener_hears_own_and_child_changes(nested_tree):
    shallow = Recorder()
    nested_tree.at("a").on_change_shallow(shallow)

    nested_tree.at("a").set("b", {"c": 5})
    nested_tree.root.set("a", {"b": 1})

    assert shallow.count == 2
    assert shallow.infos[0].path == ["b"]
    assert shallow.infos[1].path == []


@pytest.mark.unit
@pytest.mark.notify
def test_initial_assignment_reaches_grandparent_shallow_listener(nested_tree):
    """A brand new key counts one level closer than a changed one"""
    shallow = Recorder()
    nested_tree.at("a").on_change_shallow(shallow)

    nested_tree.at("a", "b").set("new", 1)
    assert shallow.count == 1

    nested_tree.at("a", "b").set("new", 2)
    assert shallow.count == 1


@pytest.mark.unit
@pytest.mark.notify
def test_ancestors_receive_origin_values_and_relative_path(nested_tree):
    root, a, leaf = Recorder(), Recorder(), Recorder()
    nested_tree.root.on_change(root)
    nested_tree.at("a").on_change(a)
    nested_tree.at("a", "b", "c").on_change(leaf)

    nested_tree.at("a", "b").set("c", 2)

    value, info = root.last
    assert value is nested_tree.value
    assert info.path == ["a", "b", "c"]
    assert (info.prev_value, info.value) == (1, 2)

    value, info = a.last
    assert value is nested_tree.value["a"]
    assert info.path == ["b", "c"]

    value, info = leaf.last
    assert value == 2
    assert info.path == []


@pytest.mark.unit
@pytest.mark.notify
def test_listeners_fire_in_registration_order(nested_tree):
    order = []
    a = nested_tree.at("a")
    a.on_change(lambda value, info: order.append("first"))
    a.on_change_shallow(lambda value, info: order.append("second"))
    a.on_change(lambda value, info: order.append("third"))

    a.set("b", 0)

    assert order == ["first", "second", "third"]


@pytest.mark.unit
@pytest.mark.notify
def test_disposer_stops_future_notifications(nested_tree):
    calls = Recorder()
    dispose = nested_tree.at("a").on_change(calls)

    nested_tree.at("a").set("b", 1)
    dispose()
    dispose()
    nested_tree.at("a").set("b", 2)

    assert calls.count == 1


@pytest.mark.unit
@pytest.mark.notify
def test_unregister_during_delivery_does_not_skip_others(nested_tree):
    node = nested_tree.node("a")
    order = []

    def first(value, info):
        order.append("first")
        unregister(first_listener)
        unregister(second_listener)

    first_listener = register_listener(node, first)
    second_listener = register_listener(node, lambda value, info: order.append("second"))
    register_listener(node, lambda value, info: order.append("third"))

    nested_tree.at("a").set("b", 1)
    assert order == ["first", "second", "third"]

    order.clear()
    nested_tree.at("a").set("b", 2)
    assert order == ["third"]


@pytest.mark.unit
@pytest.mark.notify
def test_listener_registered_during_delivery_waits_for_next_change(nested_tree):
    late = Recorder()
    node = nested_tree.node("a")
    registered = []

    def first(value, info):
        if not registered:
            registered.append(register_listener(node, late))

    register_listener(node, first)
    nested_tree.at("a").set("b", 1)
    assert late.count == 0

    nested_tree.at("a").set("b", 2)
    assert late.count == 1


@pytest.mark.unit
@pytest.mark.notify
def test_equal_value_still_notifies_once_per_set(nested_tree):
    calls = Recorder()
    nested_tree.at("a", "b", "c").on_change(calls)

    nested_tree.at("a", "b").set("c", 1)
    nested_tree.at("a", "b").set("c", 1)

    assert calls.count == 2
    assert all(info.prev_value == info.value == 1 for info in calls.infos)


@pytest.mark.unit
@pytest.mark.notify
def test_nested_mutation_from_listener_runs_depth_first():
    tree = observable({"x": 0, "y": 0})
    events = []

    def on_x(value, info):
        events.append(("x", value))
        tree.root.set("y", value * 10)
        events.append(("x-done", value))

    tree.at("x").on_change(on_x)
    tree.at("y").on_change(lambda value, info: events.append(("y", value)))

    tree.root.set("x", 1)

    assert events == [("x", 1), ("y", 10), ("x-done", 1)]
    assert tree.value == {"x": 1, "y": 10}


@pytest.mark.unit
@pytest.mark.notify
def test_listener_exception_propagates_after_write():
    tree = observable({"x": 0})

    def fail(value, info):
        raise RuntimeError("listener failed")

    tree.at("x").on_change(fail)

    with pytest.raises(RuntimeError, match="listener failed"):
        tree.root.set("x", 1)
    assert tree.value["x"] == 1
    assert tree.notify_depth == 0


@pytest.mark.unit
@pytest.mark.notify
def test_max_notify_depth_bounds_runaway_listeners():
    configure_observable(max_notify_depth=5)
    tree = observable({"n": 0})

    def bump(value, info):
        tree.root.set("n", value["n"] + 1)

    tree.root.on_change(bump)

    with pytest.raises(NotificationDepthError):
        tree.root.set("n", 1)
    with pytest.raises(RecursionError):
        tree.root.set("n", 1)
    assert tree.notify_depth == 0


@pytest.mark.unit
@pytest.mark.notify
def test_notifying_node_without_listeners_is_noop(nested_tree):
    nested_tree.at("a", "b").set("c", 3)

    assert nested_tree.node("a", "b", "c").listeners is None
