"""Admission controller implementing AdmissionProtocol.

Runs the gateway's admission flow for one request on top of the four
primitive components, and exposes those primitives for callers that need
finer control.

Flow:
    1. check_banned            live Ban Record -> BANNED (nothing else runs)
    2. tier rule lookup        disabled rule   -> ALLOWED (no store write)
    3. check_and_consume       admitted        -> ALLOWED / WARNED
                                                  (+ cooldown observation)
    4. on rejection            mark cooldown, record_violation, and when the
                               escalation ladder is reached impose a ban
                                               -> LIMITED / BANNED

Architecture:
    AdmissionProtocol <- AdmissionController -> components -> ProcedureExecutor -> Redis

Errors from any component are returned unchanged. The controller never
substitutes a default decision for a Failure.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from gatekeeper.core.result import Failure, Result, Success
from gatekeeper.domain.enums import AdmissionOutcome, BanLevel
from gatekeeper.domain.errors import AdmissionError
from gatekeeper.domain.events import (
    BanImposed,
    BannedRequestRejected,
    DomainEvent,
    RateLimitCooldownExpired,
    RateLimitExceeded,
)
from gatekeeper.domain.value_objects import (
    AdmissionDecision,
    BanEscalationPolicy,
    BanRecord,
    BanStatus,
    LimitDecision,
    SlidingWindowRule,
    ViolationReport,
)
from gatekeeper.infrastructure.admission.keys import current_time_ms
from gatekeeper.infrastructure.admission.procedure_executor import to_admission_error

if TYPE_CHECKING:
    from gatekeeper.core.config import Settings
    from gatekeeper.domain.protocols.event_bus_protocol import EventBusProtocol
    from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol
    from gatekeeper.infrastructure.admission.ban_state_machine import BanStateMachine
    from gatekeeper.infrastructure.admission.cooldown_observer import (
        CooldownObserver,
    )
    from gatekeeper.infrastructure.admission.keys import AdmissionKeys
    from gatekeeper.infrastructure.admission.procedure_executor import (
        ProcedureExecutor,
    )
    from gatekeeper.infrastructure.admission.sliding_window_limiter import (
        SlidingWindowLimiter,
    )
    from gatekeeper.infrastructure.admission.violation_tracker import (
        ViolationTracker,
    )

DEFAULT_TIER = "free"


def build_tier_rules(settings: Settings) -> dict[str, SlidingWindowRule]:
    """Tier name -> rule, from configured requests per window.

    A negative request count (enterprise default) yields a disabled rule.
    """
    window_ms = settings.default_window_ms
    return {
        "free": SlidingWindowRule.from_requests_per_window(
            settings.free_requests_per_minute, window_ms
        ),
        "pro": SlidingWindowRule.from_requests_per_window(
            settings.pro_requests_per_minute, window_ms
        ),
        "enterprise": SlidingWindowRule.from_requests_per_window(
            settings.enterprise_requests_per_minute, window_ms
        ),
    }


class AdmissionController:
    """Admission core facade used by the gateway.

    Args:
        executor: Procedure executor (used directly by clear()).
        keys: Key builder for the namespace.
        limiter: Sliding window limiter.
        tracker: Violation tracker.
        bans: Ban state machine.
        cooldown: Cooldown observer.
        rules: Tier name -> SlidingWindowRule. Must contain the default tier.
        escalation: Violation count -> ban level ladder.
        violation_window_ms: Window over which violations are counted.
        warn_percentage: Window usage at which admitted requests are WARNED.
        event_bus: EventBus for domain event publishing.
        logger: Structured logger.
    """

    def __init__(
        self,
        *,
        executor: ProcedureExecutor,
        keys: AdmissionKeys,
        limiter: SlidingWindowLimiter,
        tracker: ViolationTracker,
        bans: BanStateMachine,
        cooldown: CooldownObserver,
        rules: Mapping[str, SlidingWindowRule],
        escalation: BanEscalationPolicy,
        violation_window_ms: int,
        warn_percentage: int = 80,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
    ) -> None:
        if DEFAULT_TIER not in rules:
            raise ValueError(f"rules must define the '{DEFAULT_TIER}' tier")
        if violation_window_ms <= 0:
            raise ValueError("violation_window_ms must be positive")
        self._executor = executor
        self._keys = keys
        self._limiter = limiter
        self._tracker = tracker
        self._bans = bans
        self._cooldown = cooldown
        self._rules = dict(rules)
        self._escalation = escalation
        self._violation_window_ms = violation_window_ms
        self._warn_percentage = warn_percentage
        self._event_bus = event_bus
        self._logger = logger

    # -------------------------------------------------------------------------
    # Full admission flow
    # -------------------------------------------------------------------------
    async def admit(
        self,
        identifier: str,
        *,
        tier: str = DEFAULT_TIER,
        route: str | None = None,
        now_ms: int | None = None,
    ) -> Result[AdmissionDecision, AdmissionError]:
        """Decide whether one request is admitted.

        Args:
            identifier: Opaque client identifier.
            tier: Tier name; unknown tiers fall back to the default tier.
            route: Optional route scope for the sliding window.
            now_ms: Override current time in epoch ms (for testing). The same
                instant is used for every step of this pass.

        Returns:
            Success(AdmissionDecision) or the first component Failure.
        """
        tier_name, rule = self._rule_for(tier)
        now_ms = now_ms if now_ms is not None else current_time_ms()

        match await self._bans.check_banned(identifier, now_ms=now_ms):
            case Failure(error=error):
                return Failure(error=error)
            case Success(value=ban_status):
                pass

        if ban_status.is_banned:
            return await self._reject_banned(identifier, tier_name, ban_status)

        if not rule.enabled:
            return Success(
                value=AdmissionDecision(
                    outcome=AdmissionOutcome.ALLOWED,
                    identifier=identifier,
                    tier=tier_name,
                    ban_status=ban_status,
                )
            )

        match await self._limiter.check_and_consume(
            identifier, rule.limit, rule.window_ms, route=route, now_ms=now_ms
        ):
            case Failure(error=error):
                return Failure(error=error)
            case Success(value=decision):
                pass

        if decision.exceeded:
            return await self._on_limited(
                identifier, tier_name, route, decision, ban_status, now_ms
            )
        return await self._on_admitted(
            identifier, tier_name, decision, ban_status, now_ms
        )

    async def clear(self, identifier: str) -> Result[int, AdmissionError]:
        """Delete every admission record of an identifier.

        Removes the ban, violation, cooldown and window records (route-scoped
        windows included).

        Returns:
            Success with the number of keys removed.
        """
        result = await self._executor.delete(
            self._keys.records_for(identifier),
            match=self._keys.route_windows_pattern(identifier),
        )
        match result:
            case Failure(error=error):
                return Failure(error=to_admission_error(error, identifier))
            case Success(value=removed):
                self._logger.info(
                    "admission_records_cleared",
                    identifier=identifier,
                    removed=removed,
                )
                return Success(value=removed)

    def rule_for(self, tier: str) -> SlidingWindowRule:
        return self._rule_for(tier)[1]

    # -------------------------------------------------------------------------
    # Primitive operations (AdmissionProtocol)
    # -------------------------------------------------------------------------
    async def check_banned(
        self,
        identifier: str,
        *,
        violation_window_ms: int | None = None,
        now_ms: int | None = None,
    ) -> Result[BanStatus, AdmissionError]:
        return await self._bans.check_banned(
            identifier, violation_window_ms=violation_window_ms, now_ms=now_ms
        )

    async def check_and_consume(
        self,
        identifier: str,
        limit: int,
        window_ms: int,
        *,
        route: str | None = None,
        now_ms: int | None = None,
    ) -> Result[LimitDecision, AdmissionError]:
        return await self._limiter.check_and_consume(
            identifier, limit, window_ms, route=route, now_ms=now_ms
        )

    async def record_violation(
        self,
        identifier: str,
        threshold: int,
        window_ms: int,
        *,
        now_ms: int | None = None,
    ) -> Result[ViolationReport, AdmissionError]:
        return await self._tracker.record_violation(
            identifier, threshold, window_ms, now_ms=now_ms
        )

    async def impose(
        self,
        identifier: str,
        reason: str,
        duration_ms: int,
        *,
        violation_count: int = 0,
        level: BanLevel | None = None,
        now_ms: int | None = None,
    ) -> Result[BanRecord, AdmissionError]:
        return await self._bans.impose(
            identifier,
            reason,
            duration_ms,
            violation_count=violation_count,
            level=level,
            now_ms=now_ms,
        )

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def _rule_for(self, tier: str) -> tuple[str, SlidingWindowRule]:
        rule = self._rules.get(tier)
        if rule is None:
            self._logger.debug(
                "admission_tier_unknown",
                tier=tier,
                fallback=DEFAULT_TIER,
            )
            return DEFAULT_TIER, self._rules[DEFAULT_TIER]
        return tier, rule

    async def _reject_banned(
        self,
        identifier: str,
        tier: str,
        ban_status: BanStatus,
    ) -> Result[AdmissionDecision, AdmissionError]:
        record = ban_status.ban_info
        reason = record.reason if record is not None else ""
        remaining = ban_status.remaining_ms or 0
        self._logger.warning(
            "banned_request_rejected",
            identifier=identifier,
            reason=reason,
            remaining_ms=remaining,
        )
        await self._publish(
            BannedRequestRejected(
                identifier=identifier,
                reason=reason,
                remaining_ms=remaining,
            )
        )
        return Success(
            value=AdmissionDecision(
                outcome=AdmissionOutcome.BANNED,
                identifier=identifier,
                tier=tier,
                ban_status=ban_status,
            )
        )

    async def _on_admitted(
        self,
        identifier: str,
        tier: str,
        decision: LimitDecision,
        ban_status: BanStatus,
        now_ms: int | None,
    ) -> Result[AdmissionDecision, AdmissionError]:
        match await self._cooldown.observe(identifier, decision, now_ms=now_ms):
            case Failure(error=error):
                return Failure(error=error)
            case Success(value=signal):
                pass

        if signal is not None:
            await self._publish(
                RateLimitCooldownExpired(
                    identifier=identifier,
                    limited_at_ms=signal.limited_at_ms,
                    quiet_ms=signal.quiet_ms,
                )
            )

        outcome = AdmissionOutcome.ALLOWED
        if decision.percentage_used >= self._warn_percentage:
            outcome = AdmissionOutcome.WARNED
            self._logger.warning(
                "rate_limit_near",
                identifier=identifier,
                tier=tier,
                current=decision.current,
                limit=decision.limit,
                percentage_used=decision.percentage_used,
            )

        return Success(
            value=AdmissionDecision(
                outcome=outcome,
                identifier=identifier,
                tier=tier,
                limit_decision=decision,
                ban_status=ban_status,
                cooldown=signal,
            )
        )

    async def _on_limited(
        self,
        identifier: str,
        tier: str,
        route: str | None,
        decision: LimitDecision,
        ban_status: BanStatus,
        now_ms: int | None,
    ) -> Result[AdmissionDecision, AdmissionError]:
        match await self._cooldown.mark_limited(identifier, now_ms=now_ms):
            case Failure(error=error):
                return Failure(error=error)
            case Success():
                pass

        match await self._tracker.record_violation(
            identifier,
            self._escalation.first_threshold,
            self._violation_window_ms,
            now_ms=now_ms,
        ):
            case Failure(error=error):
                return Failure(error=error)
            case Success(value=report):
                pass

        await self._publish(
            RateLimitExceeded(
                identifier=identifier,
                tier=tier,
                route=route,
                current=decision.current,
                limit=decision.limit,
                violation_count=report.violation_count,
                violations_until_ban=report.violations_until_ban,
            )
        )

        step = self._escalation.step_for(report.violation_count)
        if step is None:
            return Success(
                value=AdmissionDecision(
                    outcome=AdmissionOutcome.LIMITED,
                    identifier=identifier,
                    tier=tier,
                    limit_decision=decision,
                    ban_status=ban_status,
                    violation_report=report,
                )
            )

        match await self._bans.impose(
            identifier,
            step.reason(report.violation_count),
            step.duration_ms,
            violation_count=report.violation_count,
            level=step.level,
            now_ms=now_ms,
        ):
            case Failure(error=error):
                return Failure(error=error)
            case Success(value=record):
                pass

        await self._publish(
            BanImposed(
                identifier=identifier,
                level=record.level.value,
                reason=record.reason,
                violation_count=report.violation_count,
                expires_at_ms=record.expires_at_ms,
            )
        )
        return Success(
            value=AdmissionDecision(
                outcome=AdmissionOutcome.BANNED,
                identifier=identifier,
                tier=tier,
                limit_decision=decision,
                ban_status=BanStatus(
                    is_banned=True,
                    ban_info=record,
                    violation_count=report.violation_count,
                    remaining_ms=record.duration_ms,
                ),
                violation_report=report,
                imposed_ban=record,
            )
        )

    async def _publish(self, event: DomainEvent) -> None:
        try:
            await self._event_bus.publish(event)
        except Exception as exc:
            # Events never change the decision
            self._logger.warning(
                "admission_event_publish_failed",
                event_type=type(event).__name__,
                error=str(exc),
            )
