"""
Shared pytest fixtures and configuration for obstree tests.
"""

import pytest

from obstree import _reset_configuration, observable


@pytest.fixture(autouse=True)
def reset_configuration():
    """Reset the global configuration around each test to prevent state leakage."""
    _reset_configuration()
    yield
    _reset_configuration()


@pytest.fixture
def nested_tree():
    """Tree of ``{"a": {"b": {"c": 1}}}``."""
    return observable({"a": {"b": {"c": 1}}})


@pytest.fixture
def list_tree():
    """Tree of ``{"items": [1, 2, 3]}``."""
    return observable({"items": [1, 2, 3]})
