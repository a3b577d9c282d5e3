"""Tests for subscribe/unsubscribe lifecycle."""

import gc
import logging

import pytest

from ripple import Observable
from tests.utils import Recorder, assert_no_object_leak, settle


def test_subscribe_returns_linked_child(root):
    """subscribe creates a child listed by the parent and pointing back to it."""
    child = root.subscribe()

    assert isinstance(child, Observable)
    assert child is not root
    assert root.subscribers == [child]
    assert child.publisher is root


def test_subscribe_attaches_transforms(root):
    """The transforms are stored on the child, not on the publisher."""

    def on_emit(v):
        return v

    def on_error(e):
        return None

    child = root.subscribe(on_emit, on_error)

    assert child.on_emit is on_emit
    assert child.on_error is on_error
    assert callable(child.next_err)
    assert root.on_emit is None


def test_subscribers_keep_insertion_order(root):
    """Subscriber order is subscription order."""
    children = [root.subscribe() for _ in range(4)]

    assert root.subscribers == children


def test_subscribe_chains(root):
    """A child can itself be subscribed to."""
    grandchild = root.subscribe().subscribe()

    assert grandchild.publisher.publisher is root


def test_unsubscribe_removes_only_that_child(root):
    """unsubscribe removes the node from its publisher and nothing else."""
    first = root.subscribe()
    second = root.subscribe()
    third = root.subscribe()

    second.unsubscribe()

    assert root.subscribers == [first, third]
    assert second.publisher is None


def test_unsubscribe_keeps_own_subscribers(root):
    """Detaching a node does not detach its children."""
    middle = root.subscribe()
    leaf = middle.subscribe()

    middle.unsubscribe()

    assert middle.subscribers == [leaf]
    assert leaf.publisher is middle


def test_unsubscribe_on_root_is_noop(root):
    """A root has no publisher to detach from."""
    root.unsubscribe()

    assert root.publisher is None


def test_unsubscribe_twice_is_noop(root):
    """A detached node can be unsubscribed again without error."""
    keep = root.subscribe()
    child = root.subscribe()

    child.unsubscribe()
    child.unsubscribe()

    assert root.subscribers == [keep]


def test_unsubscribe_after_clearing_subscribers_is_noop(root, caplog):
    """After the subscriber list is replaced, unsubscribe only logs a warning."""
    child = root.subscribe()
    root.subscribers = []

    with caplog.at_level(logging.WARNING, logger="ripple.observable"):
        child.unsubscribe()

    assert root.subscribers == []
    assert "no longer listed" in caplog.text


def test_child_does_not_keep_publisher_alive():
    """The back reference to the publisher is weak."""
    child = Observable().subscribe()
    gc.collect()

    assert child.publisher is None
    child.unsubscribe()


def test_subscribe_unsubscribe_churn_does_not_leak(root):
    """Detached nodes are reclaimed."""

    def churn():
        for _ in range(200):
            root.subscribe(lambda v: v).unsubscribe()

    assert_no_object_leak(churn, "Observable")


@pytest.mark.asyncio
async def test_unsubscribed_node_receives_no_further_broadcasts(root):
    """After unsubscribe, later emits never reach the node."""
    recorder = Recorder(root)

    root.emit(1)
    await recorder.wait_for(1)

    recorder.node.unsubscribe()
    root.emit(2)
    await settle()

    assert recorder.values == [1]


@pytest.mark.asyncio
async def test_broadcast_in_flight_still_reaches_unsubscribed_node(root):
    """A broadcast already started keeps the subscriber list it began with."""
    recorder = Recorder(root)

    root.emit("in flight")
    recorder.node.unsubscribe()

    await recorder.wait_for(1)
    assert recorder.values == ["in flight"]


@pytest.mark.asyncio
async def test_subscriber_added_after_emit_misses_that_value(root):
    """New subscribers are not part of a broadcast that already started."""
    early = Recorder(root)

    root.emit("before")
    late = Recorder(root)

    await early.wait_for(1)
    await settle()
    assert late.values == []

    root.emit("after")
    await late.wait_for(1)
    assert late.values == ["after"]


@pytest.mark.asyncio
async def test_resubscribing_gives_an_independent_node(root):
    """A new subscription does not receive past broadcasts."""
    first = Recorder(root)
    root.emit("old")
    await first.wait_for(1)
    first.node.unsubscribe()

    second = Recorder(root)
    root.emit("new")
    await second.wait_for(1)
    await settle()

    assert second.node is not first.node
    assert first.values == ["old"]
    assert second.values == ["new"]


@pytest.mark.asyncio
async def test_detached_node_can_still_be_emitted_to_directly(root):
    """A detached node is not destroyed; its own emit keeps working."""
    middle = root.subscribe()
    recorder = Recorder(middle)
    middle.unsubscribe()

    middle.emit("direct")

    await recorder.wait_for(1)
    assert recorder.values == ["direct"]


@pytest.mark.asyncio
async def test_clearing_subscribers_detaches_every_branch(root):
    """Assigning an empty list stops propagation to all former children."""
    recorders = [Recorder(root) for _ in range(3)]
    root.subscribers = []

    root.emit("ignored")
    await settle()

    assert all(recorder.events == [] for recorder in recorders)
