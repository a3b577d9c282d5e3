"""
Observable - Promise-Chained Reactive Streams
=============================================

A future settles once. An Observable can be fed any number of values and pushes
each one through a tree of derived nodes, with every hop running through a
deferred-value chain. Transforms may therefore be plain functions or coroutine
functions, and errors travel down the same tree as values do.

    linear = Observable()

    quad = linear.subscribe(square_later)       # async transform
    neg = linear.subscribe(lambda x: -x)        # sync transform

    quad.subscribe(print, log_error)

    linear.emit(3)                              # fans out to quad and neg
    linear.emit(reject(ValueError("reason")))   # errors propagate too

    quad.unsubscribe()                          # detach one branch
    linear.subscribers = []                     # detach every branch

Propagation for one subscriber of a broadcast:

    resolve(value)
        .then(subscriber.on_emit, subscriber.on_error)
        .then(subscriber.emit, subscriber.next_err)

A subscriber without on_error still forwards the rejection to its own
children, because next_err re-emits it as a rejected future.

Combinators:
    Observable.all(sources): one list per round in which every source emitted
    Observable.tree(root): Observable.all over the leaves (or every node) below root
"""

import inspect
import logging
import weakref
from typing import Any, Callable, Iterable, List, Optional

from .config import get_settings
from .deferred import reject, resolve, then
from .util.traversal import collect_nodes

logger = logging.getLogger(__name__)

Producer = Callable[[Callable[[Any], None]], Any]
Transform = Optional[Callable[[Any], Any]]


def _make_next_err(node: "Observable") -> Callable[[BaseException], None]:
    def next_err(reason):
        # A rejected future nobody consumes is reported by asyncio on collection.
        if node.subscribers:
            node.emit(reject(reason))

    return next_err


class Observable:
    """
    A node in a propagation tree.

    Attributes:
        subscribers: Child nodes in broadcast order. This list owns the
            children; assigning a new list detaches all of them.
        on_emit: Value transform, set on nodes made by subscribe().
        on_error: Error transform, set on nodes made by subscribe().
        next_err: Re-emits a failure reason as a rejected future.
    """

    __slots__ = (
        "subscribers",
        "on_emit",
        "on_error",
        "next_err",
        "_publisher",
        "__weakref__",
    )

    def __init__(self, producer: Optional[Producer] = None):
        """
        Create a root node.

        Args:
            producer: Called immediately with this node's ``emit`` so that
                timers, sockets or callbacks can drive the node. Exceptions it
                raises propagate to the caller.
        """
        self.subscribers: List["Observable"] = []
        self.on_emit: Transform = None
        self.on_error: Transform = None
        self.next_err: Optional[Callable[[BaseException], None]] = None
        self._publisher: Optional[weakref.ref] = None

        if producer is not None:
            producer(self.emit)

    @property
    def publisher(self) -> Optional["Observable"]:
        """The node this one was subscribed to, or None for a root or detached node."""
        if self._publisher is None:
            return None
        return self._publisher()

    # ============================================================
    # Emit Engine
    # ============================================================

    def emit(self, value: Any) -> None:
        """
        Broadcast a value to the current subscribers.

        ``value`` may be a plain value or anything awaitable; a rejected future
        is delivered to each subscriber's error path. Returns immediately.
        The subscriber list is read once, so nodes subscribed or unsubscribed
        while the broadcast is in flight do not change who receives it.

        With no subscribers nothing is scheduled: a coroutine passed in is
        closed without running.
        """
        subscribers = tuple(self.subscribers)
        if not subscribers:
            if inspect.iscoroutine(value):
                value.close()
            return

        if get_settings().trace:
            logger.debug(
                f"{self!r} broadcasting {value!r} to {len(subscribers)} subscriber(s)"
            )

        deferred = resolve(value)
        for subscriber in subscribers:
            then(
                then(deferred, subscriber.on_emit, subscriber.on_error),
                subscriber.emit,
                subscriber.next_err,
            )

    # ============================================================
    # Subscription Management
    # ============================================================

    def subscribe(
        self, on_emit: Transform = None, on_error: Transform = None
    ) -> "Observable":
        """
        Create a child node fed by this one.

        Args:
            on_emit: Maps each value; may return a plain value or an awaitable.
                Omitted means the value passes through unchanged.
            on_error: Maps a failure reason. Its return value continues as a
                regular value; raising keeps the chain rejected. Omitted means
                the failure passes through to the child's subscribers.

        Returns:
            The new child, for chaining or a later unsubscribe().
        """
        subscriber = Observable()
        subscriber.on_emit = on_emit
        subscriber.on_error = on_error
        subscriber.next_err = _make_next_err(subscriber)

        subscriber._publisher = weakref.ref(self)
        self.subscribers.append(subscriber)

        logger.debug(f"{self!r} gained subscriber {subscriber!r}")
        return subscriber

    def unsubscribe(self) -> None:
        """
        Detach this node from its publisher.

        A no-op for root and already detached nodes. The node keeps its own
        subscribers.
        """
        publisher = self.publisher
        self._publisher = None
        if publisher is None:
            return

        try:
            publisher.subscribers.remove(self)
        except ValueError:
            logger.warning(
                f"{self!r} was no longer listed by its publisher {publisher!r}"
            )
            return

        logger.debug(f"{self!r} unsubscribed from {publisher!r}")

    # ============================================================
    # Combinators
    # ============================================================

    @classmethod
    def all(cls, iterable: Iterable["Observable"]) -> "Observable":
        """
        Combine sources into one node emitting a list per complete round.

        A round completes when every source has emitted since the last round;
        the list holds each source's latest value, in iteration order. A
        source emitting twice in one round replaces its value without
        counting twice. A failure from any source is emitted as a rejection
        and starts a new round, so every source must emit again.

        An empty iterable gives a node that never emits.
        """
        sources = list(iter(iterable))
        size = len(sources)

        def producer(emit):
            state = _Round(size)

            def on_source_emit(index):
                def record(value):
                    state.result[index] = value
                    if state.marked[index]:
                        return

                    state.marked[index] = True
                    state.count -= 1
                    if state.count == 0:
                        combined = state.result
                        state.reset()
                        logger.debug(f"Round of {size} source(s) complete")
                        emit(combined)

                return record

            def on_source_error(reason):
                state.reset()
                logger.debug(f"Source failed with {reason!r}; round reset")
                emit(reject(reason))

            for index, source in enumerate(sources):
                source.subscribe(on_source_emit(index), on_source_error)

        return cls(producer)

    @classmethod
    def tree(cls, root: "Observable", collect_all: bool = False) -> "Observable":
        """
        Combine the nodes below ``root`` with Observable.all.

        Args:
            root: Top of the tree; it is walked but never collected itself
            collect_all: Combine every descendant instead of only the leaves
        """
        return cls.all(collect_nodes(root, collect_all))

    def __repr__(self):
        kind = "root" if self.publisher is None else "child"
        return f"Observable({kind}, subscribers={len(self.subscribers)})"


class _Round:
    """Bookkeeping for one round of Observable.all."""

    __slots__ = ("size", "result", "marked", "count")

    def __init__(self, size: int):
        self.size = size
        self.reset()

    def reset(self) -> None:
        self.result = [None] * self.size
        self.marked = [False] * self.size
        self.count = self.size
