"""Integration tests for the full admission flow.

Runs AdmissionController over the real components and Lua procedures
(fakeredis with Lua). Only the event bus is mocked, so published events
can be asserted.

Scenarios:
- Free tier: ALLOWED -> WARNED -> LIMITED -> BANNED (5 min)
- Banned requests short-circuit the limiter
- Escalation to the one-day ban
- Unlimited and unknown tiers
- Cooldown signal after a quiet window
- clear() and failure propagation
"""

from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from gatekeeper.core.enums import ErrorCode
from gatekeeper.core.result import Failure, Success
from gatekeeper.domain.enums import AdmissionOutcome, AdmissionState, BanLevel
from gatekeeper.domain.events import (
    BanImposed,
    BannedRequestRejected,
    RateLimitCooldownExpired,
    RateLimitExceeded,
)
from gatekeeper.domain.value_objects import BanEscalationPolicy, SlidingWindowRule
from gatekeeper.infrastructure.admission import AdmissionController

T0 = 1_735_689_600_000
WINDOW_MS = 60_000
WEEK_MS = 7 * 24 * 60 * 60 * 1000
FIVE_MINUTES_MS = 5 * 60 * 1000


@pytest.fixture
def controller(
    executor, keys, limiter, tracker, bans, cooldown, mock_event_bus, mock_logger
):
    return AdmissionController(
        executor=executor,
        keys=keys,
        limiter=limiter,
        tracker=tracker,
        bans=bans,
        cooldown=cooldown,
        rules={
            "free": SlidingWindowRule(limit=10, window_ms=WINDOW_MS),
            "pro": SlidingWindowRule(limit=100, window_ms=WINDOW_MS),
            "enterprise": SlidingWindowRule.unlimited(WINDOW_MS),
        },
        escalation=BanEscalationPolicy.default(),
        violation_window_ms=WEEK_MS,
        warn_percentage=80,
        event_bus=mock_event_bus,
        logger=mock_logger,
    )


def _published(mock_event_bus, event_type):
    return [
        call.args[0]
        for call in mock_event_bus.publish.await_args_list
        if isinstance(call.args[0], event_type)
    ]


async def _fill_window(controller, identifier, now_ms, *, tier="free"):
    outcomes = []
    for _ in range(10):
        result = await controller.admit(identifier, tier=tier, now_ms=now_ms)
        assert isinstance(result, Success)
        outcomes.append(result.value.outcome)
    return outcomes


@pytest.mark.integration
class TestAdmissionLifecycle:
    """Test the ALLOWED -> LIMITED -> BANNED path on the free tier."""

    async def test_allowed_then_warned_within_limit(self, controller):
        outcomes = await _fill_window(controller, "ox_abc", T0)

        assert outcomes == [AdmissionOutcome.ALLOWED] * 7 + [AdmissionOutcome.WARNED] * 3

    async def test_request_over_limit_is_limited(self, controller, mock_event_bus):
        await _fill_window(controller, "ox_abc", T0)

        result = await controller.admit("ox_abc", now_ms=T0 + 1)

        decision = result.value
        assert decision.outcome is AdmissionOutcome.LIMITED
        assert decision.admitted is False
        assert decision.state is AdmissionState.LIMITED
        assert decision.violation_report.violation_count == 1
        assert decision.violations_until_ban == 4
        assert decision.retry_after_seconds == 60

        [event] = _published(mock_event_bus, RateLimitExceeded)
        assert event.identifier == "ox_abc"
        assert event.tier == "free"
        assert event.current == 10
        assert event.limit == 10
        assert event.violations_until_ban == 4

    async def test_fifth_violation_imposes_short_ban(self, controller, mock_event_bus):
        await _fill_window(controller, "ox_abc", T0)

        outcomes = []
        for _ in range(5):
            result = await controller.admit("ox_abc", now_ms=T0 + 1)
            outcomes.append(result.value.outcome)

        assert outcomes == [AdmissionOutcome.LIMITED] * 4 + [AdmissionOutcome.BANNED]
        decision = result.value
        assert decision.imposed_ban.level is BanLevel.FIVE_MINUTES
        assert decision.imposed_ban.reason == "Rate limit exceeded 5 times"
        assert decision.imposed_ban.expires_at_ms == T0 + 1 + FIVE_MINUTES_MS
        assert decision.retry_after_seconds == 300

        [event] = _published(mock_event_bus, BanImposed)
        assert event.level == "5_min"
        assert event.violation_count == 5

    async def test_banned_requests_do_not_touch_window(
        self, controller, redis_client, keys, mock_event_bus
    ):
        await controller.impose("ox_abc", "manual review", 60_000, now_ms=T0)

        result = await controller.admit("ox_abc", now_ms=T0 + 1000)

        decision = result.value
        assert decision.outcome is AdmissionOutcome.BANNED
        assert decision.limit_decision is None
        assert decision.ban_status.ban_info.level is BanLevel.MANUAL
        assert decision.retry_after_seconds == 59
        assert await redis_client.exists(keys.window("ox_abc")) == 0

        [event] = _published(mock_event_bus, BannedRequestRejected)
        assert event.reason == "manual review"
        assert event.remaining_ms == 59_000

    async def test_ban_expiry_restores_admission(self, controller):
        await controller.impose("ox_abc", "manual review", 60_000, now_ms=T0)

        result = await controller.admit("ox_abc", now_ms=T0 + 60_000)

        assert result.value.outcome is AdmissionOutcome.ALLOWED


@pytest.mark.integration
class TestBanEscalation:
    async def test_seventh_violation_escalates_to_one_day(self, controller):
        t0 = T0
        await _fill_window(controller, "ox_abc", t0)
        for _ in range(5):
            await controller.admit("ox_abc", now_ms=t0)

        # Each later ban needs a fresh window after the previous ban ends
        t1 = t0 + FIVE_MINUTES_MS
        await _fill_window(controller, "ox_abc", t1)
        sixth = await controller.admit("ox_abc", now_ms=t1)

        t2 = t1 + FIVE_MINUTES_MS
        await _fill_window(controller, "ox_abc", t2)
        seventh = await controller.admit("ox_abc", now_ms=t2)

        assert sixth.value.imposed_ban.level is BanLevel.FIVE_MINUTES
        assert sixth.value.violation_report.violation_count == 6
        assert seventh.value.imposed_ban.level is BanLevel.ONE_DAY
        assert seventh.value.imposed_ban.duration_ms == 24 * 60 * 60 * 1000

        blocked = await controller.admit("ox_abc", now_ms=t2 + FIVE_MINUTES_MS)
        assert blocked.value.outcome is AdmissionOutcome.BANNED


@pytest.mark.integration
class TestTiers:
    async def test_unlimited_tier_writes_nothing(self, controller, redis_client):
        for _ in range(50):
            result = await controller.admit("ent_1", tier="enterprise", now_ms=T0)
            assert result.value.outcome is AdmissionOutcome.ALLOWED

        assert await redis_client.keys("*") == []

    async def test_unknown_tier_uses_free_rule(self, controller):
        await _fill_window(controller, "ox_abc", T0, tier="platinum")

        result = await controller.admit("ox_abc", tier="platinum", now_ms=T0)

        assert result.value.tier == "free"
        assert result.value.outcome is AdmissionOutcome.LIMITED
        assert controller.rule_for("platinum").limit == 10

    async def test_routes_limited_independently(self, controller):
        for _ in range(10):
            await controller.admit("ox_abc", route="POST /upload", now_ms=T0)

        upload = await controller.admit("ox_abc", route="POST /upload", now_ms=T0)
        items = await controller.admit("ox_abc", route="GET /items", now_ms=T0)

        assert upload.value.outcome is AdmissionOutcome.LIMITED
        assert items.value.outcome is AdmissionOutcome.ALLOWED


@pytest.mark.integration
class TestCooldown:
    async def test_cooldown_event_after_quiet_window(self, controller, mock_event_bus):
        await _fill_window(controller, "ox_abc", T0)
        limited = await controller.admit("ox_abc", now_ms=T0)

        after = await controller.admit("ox_abc", now_ms=T0 + WINDOW_MS)
        again = await controller.admit("ox_abc", now_ms=T0 + WINDOW_MS + 1)

        assert limited.value.outcome is AdmissionOutcome.LIMITED
        assert after.value.outcome is AdmissionOutcome.ALLOWED
        assert after.value.cooldown.quiet_ms == WINDOW_MS
        assert again.value.cooldown is None

        [event] = _published(mock_event_bus, RateLimitCooldownExpired)
        assert event.identifier == "ox_abc"
        assert event.limited_at_ms == T0

    async def test_rejection_inside_window_postpones_cooldown(
        self, controller, mock_event_bus
    ):
        await _fill_window(controller, "ox_abc", T0)
        await controller.admit("ox_abc", now_ms=T0)
        await controller.admit("ox_abc", now_ms=T0 + WINDOW_MS - 1)

        result = await controller.admit("ox_abc", now_ms=T0 + WINDOW_MS)

        assert result.value.outcome is AdmissionOutcome.ALLOWED
        assert result.value.cooldown is None
        assert _published(mock_event_bus, RateLimitCooldownExpired) == []


@pytest.mark.integration
class TestClearAndFailures:
    async def test_clear_removes_every_record(self, controller, redis_client):
        await _fill_window(controller, "ox_abc", T0)
        await controller.admit("ox_abc", route="POST /upload", now_ms=T0)
        await controller.admit("ox_abc", now_ms=T0)
        await controller.impose("ox_abc", "manual", 60_000, now_ms=T0)

        result = await controller.clear("ox_abc")

        assert result == Success(value=5)
        assert await redis_client.keys("*") == []

    async def test_clear_leaves_colon_prefixed_identifier(
        self, controller, redis_client, keys
    ):
        await controller.admit("a", route="POST /upload", now_ms=T0)
        await controller.admit("a:victim", now_ms=T0)
        await controller.admit("a:victim", route="POST /upload", now_ms=T0)

        result = await controller.clear("a")

        assert result == Success(value=1)
        assert await redis_client.exists(keys.window("a:victim")) == 1
        assert await redis_client.exists(keys.window("a:victim", "POST /upload")) == 1

    async def test_event_bus_failure_does_not_change_decision(
        self, controller, mock_event_bus, mock_logger
    ):
        mock_event_bus.publish.side_effect = RuntimeError("bus down")
        await _fill_window(controller, "ox_abc", T0)

        result = await controller.admit("ox_abc", now_ms=T0)

        assert result.value.outcome is AdmissionOutcome.LIMITED
        warnings = [call.args[0] for call in mock_logger.warning.call_args_list]
        assert "admission_event_publish_failed" in warnings

    async def test_store_failure_is_returned(self, controller, redis_client, mock_event_bus):
        with patch.object(
            redis_client,
            "evalsha",
            AsyncMock(side_effect=RedisConnectionError("Connection refused")),
        ):
            result = await controller.admit("ox_abc", now_ms=T0)

        match result:
            case Failure(error=error):
                assert error.code is ErrorCode.ADMISSION_STORE_UNAVAILABLE
                assert error.details["procedure"] == "check_ban"
            case _:
                pytest.fail(f"Expected Failure, got {result}")
        mock_event_bus.publish.assert_not_awaited()

    async def test_malformed_ban_record_stops_the_flow(
        self, controller, redis_client, keys
    ):
        await redis_client.set(keys.banned("ox_abc"), b"not-json")

        result = await controller.admit("ox_abc", now_ms=T0)

        assert isinstance(result, Failure)
        assert result.error.code is ErrorCode.ADMISSION_RECORD_MALFORMED
        assert await redis_client.exists(keys.window("ox_abc")) == 0
