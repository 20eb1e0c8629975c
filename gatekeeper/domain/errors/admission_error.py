"""Admission error types.

Used when an admission operation cannot reach a decision: the store is
unreachable, a Lua procedure faulted, or a stored Ban Record is unreadable.

Usage:
    from gatekeeper.domain.errors import AdmissionError
    from gatekeeper.core.enums import ErrorCode
    from gatekeeper.core.result import Failure

    return Failure(error=AdmissionError(
        code=ErrorCode.ADMISSION_STORE_UNAVAILABLE,
        message="Redis connection refused",
        identifier="ox_abc",
    ))
"""

from dataclasses import dataclass

from gatekeeper.core.enums import ErrorCode
from gatekeeper.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class AdmissionError(DomainError):
    """Admission system failure.

    Note that "rate limited" and "banned" are NOT errors. They are successful
    operations returning exceeded=True / is_banned=True. This error class is
    for the cases where the core does not know the state.

    The core never converts an AdmissionError into a default decision. The
    gateway decides whether to fail open or closed.

    Attributes:
        code: ADMISSION_STORE_UNAVAILABLE, ADMISSION_PROCEDURE_FAULT or
            ADMISSION_RECORD_MALFORMED.
        message: Human-readable message.
        identifier: Identifier the failed operation was about, if known.
        details: Underlying cause and infrastructure code.
    """

    identifier: str | None = None

    @property
    def is_store_unavailable(self) -> bool:
        """True when the store could not be reached."""
        return self.code is ErrorCode.ADMISSION_STORE_UNAVAILABLE

    @property
    def is_procedure_fault(self) -> bool:
        """True when the atomic procedure itself failed."""
        return self.code is ErrorCode.ADMISSION_PROCEDURE_FAULT

    @property
    def is_malformed_record(self) -> bool:
        """True when a stored Ban Record could not be parsed."""
        return self.code is ErrorCode.ADMISSION_RECORD_MALFORMED
