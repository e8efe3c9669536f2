"""Pytest configuration helpers for test collection.

Put the project root on sys.path so `valuepath` and `tests.helpers`
import without installing the package or setting PYTHONPATH.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture(autouse=True)
def fresh_default_cache():
    """Each test discovers nodes from scratch."""
    from valuepath import default_cache

    default_cache.clear()
    yield
