"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Fast password hashing (minimum bcrypt cost)
- Settings cache isolation
"""

from collections.abc import Generator

import pytest

from src.config.settings import get_settings
from src.domain.passwords import MIN_BCRYPT_WORK, BcryptPasswordHasher


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """Password hasher with the cheapest valid cost factor."""
    return BcryptPasswordHasher(cost=MIN_BCRYPT_WORK)


@pytest.fixture
def clear_settings_cache() -> Generator[None, None, None]:
    """Drop cached settings before and after a test that changes the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
