"""
Deferred Values over asyncio
============================

The observable engine only needs a small promise-like surface from its
deferred-value engine. This module provides it on top of asyncio futures:

    resolve(value)                      -> future settled with value
    reject(reason)                      -> future failed with reason
    then(future, on_fulfilled, on_rejected) -> chained future
    never()                             -> future that never settles

Guarantees inherited from asyncio.Future:
    - a future settles at most once
    - done callbacks run on the event loop, never synchronously, and in the
      order they were registered

Handlers passed to then() may be plain functions, coroutine functions, or
functions returning any awaitable. A missing handler passes the outcome
through unchanged; a handler that raises rejects the chained future.
"""

import asyncio
import concurrent.futures
import inspect
import logging
from typing import Any, Callable, Optional

from .config import get_settings
from .errors import NoEventLoopError, Rejection

logger = logging.getLogger(__name__)

Handler = Optional[Callable[[Any], Any]]


def _loop(loop: Optional[asyncio.AbstractEventLoop] = None):
    """Pick the loop deferred values are bound to."""
    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        fallback = get_settings().loop
        if fallback is None:
            raise NoEventLoopError(
                "No running event loop; start one or call "
                "ripple.configure(loop=...) first"
            ) from None
        return fallback


def is_deferred(value: Any) -> bool:
    """True for anything resolve() would wait on instead of wrapping."""
    return (
        asyncio.isfuture(value)
        or isinstance(value, concurrent.futures.Future)
        or inspect.isawaitable(value)
    )


def resolve(value: Any, loop: Optional[asyncio.AbstractEventLoop] = None):
    """
    Normalize any value into an asyncio future.

    Futures are returned unchanged, so resolving the same future twice gives
    the same object. Coroutines and other awaitables are scheduled on the loop.
    """
    if asyncio.isfuture(value):
        return value

    loop = _loop(loop)
    if isinstance(value, concurrent.futures.Future):
        return asyncio.wrap_future(value, loop=loop)
    if inspect.isawaitable(value):
        return asyncio.ensure_future(value, loop=loop)

    future = loop.create_future()
    future.set_result(value)
    return future


def reject(reason: Any, loop: Optional[asyncio.AbstractEventLoop] = None):
    """Return a future already failed with ``reason``."""
    if not isinstance(reason, BaseException):
        reason = Rejection(reason)

    future = _loop(loop).create_future()
    if isinstance(reason, asyncio.CancelledError):
        future.cancel()
    else:
        future.set_exception(reason)
    return future


def never(loop: Optional[asyncio.AbstractEventLoop] = None):
    """Return a future that never settles."""
    return _loop(loop).create_future()


def _failure(future) -> Optional[BaseException]:
    if future.cancelled():
        return asyncio.CancelledError()
    return future.exception()


def _copy_outcome(source, target) -> None:
    if target.done():
        return
    if source.cancelled():
        target.cancel()
        return
    error = source.exception()
    if error is not None:
        target.set_exception(error)
    else:
        target.set_result(source.result())


def then(deferred, on_fulfilled: Handler = None, on_rejected: Handler = None):
    """
    Chain handlers onto a future and return the chained future.

    Exactly one of the handlers runs, once, after ``deferred`` settles. A
    cancelled source counts as a rejection with ``asyncio.CancelledError``,
    and a handler raising ``asyncio.CancelledError`` cancels the chain.
    """
    loop = deferred.get_loop()
    chained = loop.create_future()

    def _settle(source):
        if chained.done():
            return

        error = _failure(source)
        if error is None:
            handler, argument = on_fulfilled, source.result()
        else:
            handler, argument = on_rejected, error

        if handler is None:
            _copy_outcome(source, chained)
            return

        try:
            outcome = handler(argument)
        except asyncio.CancelledError:
            logger.debug(f"Handler {handler!r} cancelled; cancelling chain")
            chained.cancel()
            return
        except Exception as e:
            logger.debug(f"Handler {handler!r} raised {e!r}; rejecting chain")
            chained.set_exception(e)
            return

        if is_deferred(outcome):
            inner = resolve(outcome, loop)
            inner.add_done_callback(lambda settled: _copy_outcome(settled, chained))
        else:
            chained.set_result(outcome)

    deferred.add_done_callback(_settle)
    return chained
