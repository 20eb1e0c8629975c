"""Ban state machine.

The CLEAR / LIMITED / BANNED state of an identifier is derived from record
presence; nothing stores the state itself.

Transitions:
    CLEAR   -> LIMITED   limiter reports exceeded
    LIMITED -> CLEAR     window slides (no action needed)
    any     -> BANNED    impose()
    BANNED  -> CLEAR     Ban Record expires in the store

A live Ban Record short-circuits every other check. A record is live when it
exists and its ``expires_at`` is still in the future, so an expired record
the store has not yet reclaimed is never reported as a ban.

Re-ban policy:
    impose() on an already banned identifier overwrites the record and
    restarts the clock with the new duration.
"""

from typing import Any

from gatekeeper.core.enums import ErrorCode
from gatekeeper.core.result import Failure, Result, Success
from gatekeeper.domain.enums import BanLevel
from gatekeeper.domain.errors import AdmissionError
from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol
from gatekeeper.domain.value_objects import BanRecord, BanStatus
from gatekeeper.infrastructure.admission.keys import AdmissionKeys, current_time_ms
from gatekeeper.infrastructure.admission.procedure_executor import (
    ProcedureExecutor,
    invalid_reply,
    to_admission_error,
)
from gatekeeper.infrastructure.admission.procedures import CHECK_BAN, IMPOSE_BAN
from gatekeeper.infrastructure.enums import InfrastructureErrorCode


class BanStateMachine:
    """Reads and writes Ban Records.

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

    async def check_banned(
        self,
        identifier: str,
        *,
        violation_window_ms: int | None = None,
        now_ms: int | None = None,
    ) -> Result[BanStatus, AdmissionError]:
        """Read ban state in one atomic step.

        Args:
            identifier: Identifier to check.
            violation_window_ms: When set, the in-window violation count is
                read in the same step.
            now_ms: Override current time in epoch ms (for testing).

        Returns:
            Success(BanStatus). ``is_banned`` is False whenever no live record
            exists, regardless of violation history. Failure(AdmissionError)
            with ADMISSION_RECORD_MALFORMED when the stored record cannot be
            parsed.
        """
        now = now_ms if now_ms is not None else current_time_ms()
        window_start = (
            "" if violation_window_ms is None else now - violation_window_ms
        )

        result = await self._executor.execute(
            CHECK_BAN,
            keys=[self._keys.banned(identifier), self._keys.violations(identifier)],
            args=[window_start],
        )

        match result:
            case Failure(error=error):
                return Failure(error=to_admission_error(error, identifier))
            case Success(value=reply):
                pass

        try:
            present, raw, count, pttl = reply
            present, count, pttl = int(present), int(count), int(pttl)
        except (TypeError, ValueError) as exc:
            return Failure(error=invalid_reply(CHECK_BAN, identifier, reply, exc))

        if not present:
            return Success(value=BanStatus(is_banned=False, violation_count=count))

        try:
            record = BanRecord.from_json(raw)
        except ValueError as exc:
            self._logger.error(
                "ban_record_malformed",
                error=exc,
                identifier=identifier,
            )
            return Failure(error=_malformed(identifier, raw, exc))

        if not record.is_active(now):
            return Success(value=BanStatus(is_banned=False, violation_count=count))

        remaining = record.remaining_ms(now)
        if pttl > 0:
            remaining = min(remaining, pttl)

        return Success(
            value=BanStatus(
                is_banned=True,
                ban_info=record,
                violation_count=count,
                remaining_ms=remaining,
            )
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
        """Write a Ban Record whose store TTL equals ``duration_ms``.

        Args:
            identifier: Identifier to ban.
            reason: Reason stored on the record.
            duration_ms: Ban length in milliseconds.
            violation_count: In-window violations at ban time.
            level: Escalation level (MANUAL when omitted).
            now_ms: Override current time in epoch ms (for testing).

        Returns:
            Success(BanRecord) as written, or Failure(AdmissionError).

        Raises:
            ValueError: If duration_ms is not positive.
        """
        if duration_ms <= 0:
            raise ValueError(f"duration_ms must be positive, got {duration_ms}")

        now = now_ms if now_ms is not None else current_time_ms()
        record = BanRecord(
            reason=reason,
            issued_at_ms=now,
            expires_at_ms=now + duration_ms,
            violation_count_at_ban=violation_count,
            level=level or BanLevel.MANUAL,
        )

        result = await self._executor.execute(
            IMPOSE_BAN,
            keys=[self._keys.banned(identifier)],
            args=[record.to_json(), duration_ms],
        )

        match result:
            case Failure(error=error):
                return Failure(error=to_admission_error(error, identifier))
            case Success():
                pass

        self._logger.info(
            "ban_imposed",
            identifier=identifier,
            ban_level=record.level.value,
            duration_ms=duration_ms,
            violation_count=violation_count,
        )
        return Success(value=record)


def _malformed(identifier: str, raw: Any, cause: Exception) -> AdmissionError:
    return AdmissionError(
        code=ErrorCode.ADMISSION_RECORD_MALFORMED,
        message=f"Stored ban record for '{identifier}' could not be parsed",
        identifier=identifier,
        details={
            "infrastructure_code": InfrastructureErrorCode.RECORD_DECODE_FAILED.value,
            "raw": repr(raw)[:200],
            "error_message": str(cause),
        },
    )
