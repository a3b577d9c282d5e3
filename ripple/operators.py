"""
Composition helpers built from subscribe() and emit().

filtered(predicate)
    Transform for subscribe() that lets a value through only when the
    predicate holds. Other values are answered with a future that never
    settles, which stops that value at this node.

merge(sources)
    A root node that re-emits every value of every source.
"""

from typing import Any, Callable, Iterable

from .deferred import never
from .observable import Observable


def filtered(predicate: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """
    Build a transform that drops values failing ``predicate``.

    Example:
        text = keyup.subscribe(lambda event: event.text)
        long_text = text.subscribe(filtered(lambda s: len(s) > 3))
    """

    def transform(value):
        if predicate(value):
            return value
        return never()

    return transform


def merge(sources: Iterable[Observable]) -> Observable:
    """Merge several observables into one that emits whatever any of them emits."""
    sources = list(sources)

    def producer(emit):
        for source in sources:
            source.subscribe(emit)

    return Observable(producer)
