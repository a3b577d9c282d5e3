"""
Ripple Utils
============

Helpers that work on subscription trees without being part of the node API.

Functions:
- collect_nodes: depth-first collection of the nodes below a root
"""

from .traversal import collect_nodes

__all__ = [
    "collect_nodes",
]
