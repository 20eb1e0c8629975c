"""Cooldown observer.

Emits a one-shot signal when an identifier that was recently limited is
admitted again after a full quiet window. The limiter has no notion of
"cooldown": its window slides continuously. This helper keeps its own marker
(``<namespace>:limited:<identifier>``) outside the core records.

Usage:
    match await limiter.check_and_consume(identifier, 10, 60_000):
        case Success(value=decision) if decision.exceeded:
            await observer.mark_limited(identifier)
        case Success(value=decision):
            signal = await observer.observe(identifier, decision)
"""

from gatekeeper.core.result import Failure, Result, Success
from gatekeeper.domain.errors import AdmissionError
from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol
from gatekeeper.domain.value_objects import CooldownSignal, LimitDecision
from gatekeeper.infrastructure.admission.keys import AdmissionKeys, current_time_ms
from gatekeeper.infrastructure.admission.procedure_executor import (
    ProcedureExecutor,
    invalid_reply,
    to_admission_error,
)
from gatekeeper.infrastructure.admission.procedures import (
    CLEAR_COOLDOWN,
    MARK_LIMITED,
)


class CooldownObserver:
    """Tracks "recently limited" markers and reports when they clear.

    Args:
        executor: Atomic procedure executor.
        keys: Key builder for the namespace.
        logger: Structured logger.
        marker_ttl_seconds: Lifetime of a marker nobody observes.
    """

    def __init__(
        self,
        *,
        executor: ProcedureExecutor,
        keys: AdmissionKeys,
        logger: LoggerProtocol,
        marker_ttl_seconds: int = 86_400,
    ) -> None:
        if marker_ttl_seconds <= 0:
            raise ValueError("marker_ttl_seconds must be positive")
        self._executor = executor
        self._keys = keys
        self._logger = logger
        self._marker_ttl_seconds = marker_ttl_seconds

    async def mark_limited(
        self,
        identifier: str,
        *,
        now_ms: int | None = None,
    ) -> Result[int, AdmissionError]:
        """Record the time of the latest limiter rejection.

        Returns:
            Success with the marker timestamp (epoch ms).
        """
        now = now_ms if now_ms is not None else current_time_ms()
        result = await self._executor.execute(
            MARK_LIMITED,
            keys=[self._keys.limited(identifier)],
            args=[now, self._marker_ttl_seconds],
        )
        match result:
            case Failure(error=error):
                return Failure(error=to_admission_error(error, identifier))
            case Success():
                return Success(value=now)

    async def observe(
        self,
        identifier: str,
        decision: LimitDecision,
        *,
        now_ms: int | None = None,
    ) -> Result[CooldownSignal | None, AdmissionError]:
        """Consume the marker if a full window has passed since it was set.

        The read and delete happen in one script, so when two workers race
        on the same identifier at most one of them gets the signal.

        Args:
            identifier: Identifier that was just admitted.
            decision: The limiter decision for this request.
            now_ms: Override current time in epoch ms (for testing).

        Returns:
            Success(CooldownSignal) once per cooldown, otherwise Success(None).
        """
        if decision.exceeded or decision.window_ms <= 0:
            return Success(value=None)

        now = now_ms if now_ms is not None else current_time_ms()
        result = await self._executor.execute(
            CLEAR_COOLDOWN,
            keys=[self._keys.limited(identifier)],
            args=[now, decision.window_ms],
        )

        match result:
            case Failure(error=error):
                return Failure(error=to_admission_error(error, identifier))
            case Success(value=reply):
                pass

        try:
            cleared, limited_at = reply
            if not int(cleared):
                return Success(value=None)
            signal = CooldownSignal(
                identifier=identifier,
                limited_at_ms=int(limited_at),
                observed_at_ms=now,
            )
        except (TypeError, ValueError) as exc:
            return Failure(error=invalid_reply(CLEAR_COOLDOWN, identifier, reply, exc))

        self._logger.info(
            "rate_limit_cooldown_expired",
            identifier=identifier,
            limited_at=signal.limited_at_ms,
            quiet_ms=signal.quiet_ms,
        )
        return Success(value=signal)
