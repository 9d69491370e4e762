"""Shared pytest fixtures for Spotboard tests.

This module provides fixtures for:
- Test environment variables
- An in-memory store standing in for Supabase
- Test data factories
- A fake clock for rate limiter tests

Usage:
    @pytest.mark.asyncio
    async def test_something(memory_store, token_record_factory):
        record = token_record_factory()
        await memory_store.insert("tokens", record.to_row())
"""

import os
from collections.abc import Generator

import pytest

from tests.factories.token import (
    SpotTokenFactory,
    StartPxEntryFactory,
    TokenDetailsFactory,
    TokenRecordFactory,
)
from tests.support.fake_clock import FakeClock
from tests.support.memory_store import InMemoryStore

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables.

    Loads .env file first, then sets defaults for any missing variables.
    """
    from dotenv import load_dotenv

    original_env = os.environ.copy()

    # Load .env file if it exists (won't override existing env vars)
    load_dotenv()

    os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
    os.environ.setdefault("SUPABASE_KEY", "test-key")

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test read settings from the current environment."""
    from spotboard.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Store and Clock Fixtures
# =============================================================================


@pytest.fixture
def memory_store() -> InMemoryStore:
    """Provide an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a fake clock starting at t=0."""
    return FakeClock()


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def spot_token_factory() -> type[SpotTokenFactory]:
    """Provide factory for listing entries."""
    return SpotTokenFactory


@pytest.fixture
def token_details_factory() -> type[TokenDetailsFactory]:
    """Provide factory for token details."""
    return TokenDetailsFactory


@pytest.fixture
def token_record_factory() -> type[TokenRecordFactory]:
    """Provide factory for stored token records."""
    return TokenRecordFactory


@pytest.fixture
def start_px_entry_factory() -> type[StartPxEntryFactory]:
    """Provide factory for start price entries."""
    return StartPxEntryFactory
