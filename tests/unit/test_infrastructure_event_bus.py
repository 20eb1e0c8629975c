"""Unit tests for InMemoryEventBus.

Tests cover:
- Handlers receive the published event
- Events without handlers are a no-op
- A failing handler is logged and does not stop the others
- Metadata is visible to handlers only during publish
"""

from unittest.mock import AsyncMock

import pytest

from gatekeeper.domain.events import BanImposed, RateLimitExceeded
from gatekeeper.infrastructure.events.in_memory_event_bus import InMemoryEventBus


def _ban_event() -> BanImposed:
    return BanImposed(
        identifier="ox_abc",
        level="5_min",
        reason="Rate limit exceeded 5 times",
        violation_count=5,
        expires_at_ms=1_735_689_900_000,
    )


@pytest.mark.unit
class TestInMemoryEventBus:
    """Test InMemoryEventBus publish/subscribe."""

    async def test_handler_receives_event(self, mock_logger):
        bus = InMemoryEventBus(logger=mock_logger)
        handler = AsyncMock()
        bus.subscribe(BanImposed, handler)

        event = _ban_event()
        await bus.publish(event)

        handler.assert_awaited_once_with(event)

    async def test_handlers_matched_by_exact_type(self, mock_logger):
        bus = InMemoryEventBus(logger=mock_logger)
        handler = AsyncMock()
        bus.subscribe(RateLimitExceeded, handler)

        await bus.publish(_ban_event())

        handler.assert_not_awaited()
        assert bus.handler_count(BanImposed) == 0
        assert bus.handler_count(RateLimitExceeded) == 1

    async def test_failing_handler_does_not_block_others(self, mock_logger):
        bus = InMemoryEventBus(logger=mock_logger)
        failing = AsyncMock(side_effect=RuntimeError("pager down"))
        failing.__name__ = "page_on_call"
        healthy = AsyncMock()
        bus.subscribe(BanImposed, failing)
        bus.subscribe(BanImposed, healthy)

        await bus.publish(_ban_event())

        healthy.assert_awaited_once()
        mock_logger.warning.assert_called_once()
        args, kwargs = mock_logger.warning.call_args
        assert args == ("event_handler_failed",)
        assert kwargs["handler_name"] == "page_on_call"
        assert kwargs["error_type"] == "RuntimeError"
        assert kwargs["error_message"] == "pager down"

    async def test_metadata_visible_during_publish_only(self, mock_logger):
        bus = InMemoryEventBus(logger=mock_logger)
        seen: list[dict[str, str]] = []

        async def record_metadata(event):
            seen.append(bus.get_metadata())

        bus.subscribe(BanImposed, record_metadata)
        await bus.publish(_ban_event(), metadata={"worker": "gw-1"})

        assert seen == [{"worker": "gw-1"}]
        assert bus.get_metadata() == {}

    def test_duplicate_subscription_runs_twice(self, mock_logger):
        bus = InMemoryEventBus(logger=mock_logger)

        async def handler(event):
            return None

        bus.subscribe(BanImposed, handler)
        bus.subscribe(BanImposed, handler)

        assert bus.handler_count(BanImposed) == 2
