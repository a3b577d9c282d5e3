"""
Process-wide settings for ripple.

Settings are a frozen dataclass held in one module-level instance; configure()
swaps in an updated copy. Tests call reset_settings() between cases.
"""

import asyncio
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings.

    Attributes:
        loop: Event loop used for deferred values when no loop is running.
            Lets synchronous setup code emit before the loop is started.
        trace: Log every broadcast at DEBUG level.
    """

    loop: Optional[asyncio.AbstractEventLoop] = None
    trace: bool = False


_settings = Settings()

_EXPECTED_TYPES = {
    "loop": (asyncio.AbstractEventLoop, type(None)),
    "trace": (bool,),
}


def get_settings() -> Settings:
    """Return the active settings."""
    return _settings


def configure(**overrides: Any) -> Settings:
    """
    Update one or more settings and return the new settings.

    Raises:
        ConfigurationError: for an unknown name or a value of the wrong type.
    """
    global _settings

    known = {f.name for f in fields(Settings)}
    for name, value in overrides.items():
        if name not in known:
            raise ConfigurationError(f"Unknown setting: {name!r}")
        if not isinstance(value, _EXPECTED_TYPES[name]):
            raise ConfigurationError(
                f"Setting {name!r} expects {_EXPECTED_TYPES[name][0].__name__}, "
                f"got {type(value).__name__}"
            )

    _settings = replace(_settings, **overrides)
    logger.debug(f"Settings updated: {sorted(overrides)}")
    return _settings


def reset_settings() -> None:
    """Restore the default settings."""
    global _settings
    _settings = Settings()
