"""
Subscription Tree Traversal
===========================

Depth-first walks over a subscription tree. Each node is visited in
subscriber-list order, so the order of the collected nodes matches the order a
broadcast would reach them.

The walk keeps its own explicit stack and accumulator: nothing is shared
between calls, and chains deeper than the interpreter's recursion limit are
walked without trouble.
"""

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from ..observable import Observable


def collect_nodes(root: "Observable", collect_all: bool = False) -> List["Observable"]:
    """
    Collect the nodes below ``root`` in depth-first order.

    The root itself is never collected.

    Args:
        root: Node whose descendants are walked
        collect_all: Collect every descendant instead of only the leaves

    Returns:
        The collected nodes. With ``collect_all`` False only nodes without
        subscribers are included, but nodes with subscribers are still walked.
    """
    collected = []
    # Reversed so the first subscriber is popped first
    stack = list(reversed(root.subscribers))

    while stack:
        node = stack.pop()
        children = node.subscribers

        if collect_all or not children:
            collected.append(node)

        stack.extend(reversed(children))

    return collected

