"""
Ripple Exceptions
=================

All errors raised by ripple itself derive from RippleError. Errors raised by user
transforms are never wrapped: they travel down the subscription tree as the
rejection reason exactly as they were raised.
"""

from typing import Any


class RippleError(Exception):
    """Base class for ripple errors."""

    pass


class Rejection(RippleError):
    """
    Rejection reason that is not an exception.

    Futures can only be rejected with exceptions, so reject("timeout") stores
    "timeout" on this wrapper. The original object is available as ``reason``.
    """

    def __init__(self, reason: Any):
        super().__init__(reason)
        self.reason = reason

    def __repr__(self):
        return f"Rejection({self.reason!r})"


class NoEventLoopError(RippleError, RuntimeError):
    """No running event loop and no fallback loop configured."""

    pass


class ConfigurationError(RippleError, ValueError):
    """Unknown setting, or a setting of the wrong type."""

    pass
