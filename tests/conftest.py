"""
Shared pytest fixtures and configuration for ripple tests.
"""

import pytest

from ripple import Observable, reset_settings


@pytest.fixture(autouse=True)
def reset_ripple_settings():
    """Reset the process-wide settings around each test to prevent state leakage."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def root():
    """Provide a fresh root observable."""
    return Observable()
