"""
Test utilities for ripple.

This package contains shared testing utilities to help write
better, more maintainable tests.
"""

from .memory_utils import assert_no_object_leak, count_types
from .recorder import Recorder, settle

__all__ = [
    "assert_no_object_leak",
    "count_types",
    "Recorder",
    "settle",
]
