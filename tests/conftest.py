# tests/conftest.py
"""
Shared fixtures and value factories for the assume-shims test suite.
"""

import pytest

from assume_shims import new_provider, number_val, string_val


def strings(*texts):
    """Convenience: a tuple of Known string values."""
    return tuple(string_val(t) for t in texts)


def num(n):
    return number_val(n)


@pytest.fixture(scope="module")
def provider():
    """The standard function registry, built once per module."""
    return new_provider()
