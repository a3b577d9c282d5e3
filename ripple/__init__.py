"""
Ripple - Promise-Chained Observable Streams

A future resolves once; an Observable can be fed values over and over and
pushes each one asynchronously through a tree of derived observables, carrying
errors down the same tree.
"""

from .config import Settings, configure, get_settings, reset_settings
from .deferred import never, reject, resolve, then
from .errors import ConfigurationError, NoEventLoopError, Rejection, RippleError
from .observable import Observable
from .operators import filtered, merge

__version__ = "0.9.7"

__all__ = [
    # Core
    "Observable",
    # Operators
    "filtered",
    "merge",
    # Deferred values
    "resolve",
    "reject",
    "then",
    "never",
    # Configuration
    "Settings",
    "configure",
    "get_settings",
    "reset_settings",
    # Exceptions
    "RippleError",
    "Rejection",
    "NoEventLoopError",
    "ConfigurationError",
]
