"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def database():
    """Fresh schema per test; disposed afterwards."""
    from tests import make_test_database

    db = make_test_database()
    yield db
    db.dispose()


@pytest.fixture(autouse=True)
def clear_config_cache():
    """get_config() is lru_cached; keep environment patches from leaking between tests."""
    from web.backend.config import get_config

    get_config.cache_clear()
    yield
    get_config.cache_clear()
