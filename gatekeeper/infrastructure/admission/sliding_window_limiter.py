"""Sliding window rate limiter.

Admits at most ``limit`` requests per trailing ``window_ms`` for one
identifier across every gateway worker. Check and record happen in the same
Lua script, so N concurrent calls against a window with room for k admit
exactly k.

Boundary behavior:
    - A timestamp exactly ``window_ms`` old has left the window
    - ``count == limit`` rejects (the limit is inclusive of accepted requests)
    - A rejected request is never recorded and never consumes a slot
"""

from typing import Any

from gatekeeper.core.result import Failure, Result, Success
from gatekeeper.domain.errors import AdmissionError
from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol
from gatekeeper.domain.value_objects import LimitDecision, SlidingWindowRule
from gatekeeper.infrastructure.admission.keys import (
    AdmissionKeys,
    current_time_ms,
    unique_member,
)
from gatekeeper.infrastructure.admission.procedure_executor import (
    ProcedureExecutor,
    invalid_reply,
    to_admission_error,
)
from gatekeeper.infrastructure.admission.procedures import SLIDING_WINDOW


class SlidingWindowLimiter:
    """Sliding window check-and-consume over a Redis sorted set."""

    def __init__(
        self,
        *,
        executor: ProcedureExecutor,
        keys: AdmissionKeys,
        logger: LoggerProtocol,
    ) -> None:
        self._executor = executor
        self._keys = keys
        self._logger = logger

    async def check_and_consume(
        self,
        identifier: str,
        limit: int,
        window_ms: int,
        *,
        route: str | None = None,
        now_ms: int | None = None,
    ) -> Result[LimitDecision, AdmissionError]:
        """Atomically admit-and-record or reject.

        Args:
            identifier: Opaque identifier (API key, client id).
            limit: Accepted requests per window.
            window_ms: Window length in milliseconds.
            route: Optional route scope; each route gets its own window.
            now_ms: Override current time in epoch ms (for testing).

        Returns:
            Success(LimitDecision) whether admitted or rejected, or
            Failure(AdmissionError) when the store could not decide.

        Raises:
            ValueError: If limit or window_ms is not positive.
        """
        rule = SlidingWindowRule(limit=limit, window_ms=window_ms)
        now = now_ms if now_ms is not None else current_time_ms()
        key = self._keys.window(identifier, route)

        result = await self._executor.execute(
            SLIDING_WINDOW,
            keys=[key],
            args=[
                now,
                now - rule.window_ms,
                rule.limit,
                unique_member(now),
                rule.ttl_seconds,
            ],
        )

        match result:
            case Failure(error=error):
                return Failure(error=to_admission_error(error, identifier))
            case Success(value=reply):
                pass

        try:
            decision = self._to_decision(reply, rule)
        except (TypeError, ValueError) as exc:
            return Failure(error=invalid_reply(SLIDING_WINDOW, identifier, reply, exc))

        if decision.exceeded:
            self._logger.warning(
                "rate_limit_exceeded",
                identifier=identifier,
                route=route,
                current=decision.current,
                limit=decision.limit,
            )
        else:
            self._logger.debug(
                "rate_limit_allowed",
                identifier=identifier,
                route=route,
                current=decision.current,
                limit=decision.limit,
            )
        return Success(value=decision)

    @staticmethod
    def _to_decision(reply: tuple[Any, ...], rule: SlidingWindowRule) -> LimitDecision:
        exceeded, current, limit = reply
        return LimitDecision(
            exceeded=bool(int(exceeded)),
            current=int(current),
            limit=int(limit),
            window_ms=rule.window_ms,
        )
