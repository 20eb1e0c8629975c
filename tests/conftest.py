"""Pytest configuration and shared fixtures.

Every Redis-backed fixture gets its own FakeServer, so tests never share
store state. fakeredis runs the real Lua scripts (requires the ``lua``
extra, which installs lupa).
"""

import inspect
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import pytest
import pytest_asyncio

from gatekeeper.infrastructure.admission import (
    AdmissionKeys,
    BanStateMachine,
    CooldownObserver,
    ProcedureExecutor,
    SlidingWindowLimiter,
    ViolationTracker,
)


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests of the full admission flow"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions."""
    for item in items:
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)


@pytest_asyncio.fixture
async def redis_client():
    """In-memory Redis with Lua support, isolated per test."""
    client = fakeredis.FakeAsyncRedis(
        server=fakeredis.FakeServer(),
        decode_responses=False,
    )
    yield client
    await client.aclose()


@pytest.fixture
def mock_logger():
    """Provide a mock logger for testing.

    Usage:
        def test_something(mock_logger):
            limiter = SlidingWindowLimiter(..., logger=mock_logger)
            mock_logger.warning.assert_called_once()
    """
    logger = MagicMock()
    logger.bind.return_value = logger
    logger.with_context.return_value = logger
    return logger


@pytest.fixture
def mock_event_bus():
    """Provide a mock event bus that records published events."""
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=None)
    event_bus.subscribe = MagicMock(return_value=None)
    return event_bus


@pytest.fixture
def keys():
    return AdmissionKeys(namespace="test")


@pytest.fixture
def executor(redis_client, mock_logger):
    return ProcedureExecutor(redis_client=redis_client, logger=mock_logger)


@pytest.fixture
def limiter(executor, keys, mock_logger):
    return SlidingWindowLimiter(executor=executor, keys=keys, logger=mock_logger)


@pytest.fixture
def tracker(executor, keys, mock_logger):
    return ViolationTracker(executor=executor, keys=keys, logger=mock_logger)


@pytest.fixture
def bans(executor, keys, mock_logger):
    return BanStateMachine(executor=executor, keys=keys, logger=mock_logger)


@pytest.fixture
def cooldown(executor, keys, mock_logger):
    return CooldownObserver(
        executor=executor,
        keys=keys,
        logger=mock_logger,
        marker_ttl_seconds=3600,
    )
