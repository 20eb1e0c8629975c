"""Violation tracker.

Counts limiter rejections per identifier over a trailing violation window
(typically days, far longer than the rate limit window). The tracker only
reports ``should_ban``; it never writes a Ban Record itself.
"""

from gatekeeper.core.result import Failure, Result, Success
from gatekeeper.domain.errors import AdmissionError
from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol
from gatekeeper.domain.value_objects import ViolationPolicy, ViolationReport
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
from gatekeeper.infrastructure.admission.procedures import RECORD_VIOLATION


class ViolationTracker:
    """Counts limiter rejections in a Redis sorted set.

    Args:
        executor: Atomic procedure executor.
        keys: Key builder for the namespace.
        logger: Structured logger.
    """

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

    async def record_violation(
        self,
        identifier: str,
        threshold: int,
        window_ms: int,
        *,
        now_ms: int | None = None,
    ) -> Result[ViolationReport, AdmissionError]:
        """Append one violation, trim, and count.

        Args:
            identifier: Identifier that was limited.
            threshold: Count at which should_ban becomes True.
            window_ms: Violation window in milliseconds.
            now_ms: Override current time in epoch ms (for testing).

        Returns:
            Success(ViolationReport) or Failure(AdmissionError).

        Raises:
            ValueError: If threshold or window_ms is not positive.
        """
        policy = ViolationPolicy(threshold=threshold, window_ms=window_ms)
        now = now_ms if now_ms is not None else current_time_ms()

        result = await self._executor.execute(
            RECORD_VIOLATION,
            keys=[self._keys.violations(identifier)],
            args=[
                now,
                now - policy.window_ms,
                policy.threshold,
                unique_member(now),
                policy.ttl_seconds,
            ],
        )

        match result:
            case Failure(error=error):
                return Failure(error=to_admission_error(error, identifier))
            case Success(value=reply):
                pass

        try:
            should_ban, count = reply
            report = ViolationReport(
                should_ban=bool(int(should_ban)),
                violation_count=int(count),
                threshold=policy.threshold,
            )
        except (TypeError, ValueError) as exc:
            return Failure(
                error=invalid_reply(RECORD_VIOLATION, identifier, reply, exc)
            )

        self._logger.info(
            "violation_recorded",
            identifier=identifier,
            violation_count=report.violation_count,
            threshold=report.threshold,
            should_ban=report.should_ban,
        )
        return Success(value=report)
