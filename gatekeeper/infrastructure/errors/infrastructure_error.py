"""Infrastructure layer error types.

Infrastructure errors represent failures in the shared store or in the Lua
procedures running inside it.

Architecture:
- Infrastructure catches redis exceptions and maps them to error data
- Infrastructure errors inherit from DomainError (not Exception)
- Uses InfrastructureErrorCode for internal error tracking
- Components map them to AdmissionError at their boundary
"""

from dataclasses import dataclass

from gatekeeper.core.errors import DomainError
from gatekeeper.infrastructure.enums import InfrastructureErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class InfrastructureError(DomainError):
    """Base infrastructure error.

    Attributes:
        code: Domain ErrorCode (maps from InfrastructureErrorCode).
        message: Human-readable message.
        infrastructure_code: Original infrastructure error code.
        details: Additional context (underlying exception, keys).
    """

    infrastructure_code: InfrastructureErrorCode | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExecutionError(InfrastructureError):
    """Atomic procedure execution failure.

    Attributes:
        code: ADMISSION_STORE_UNAVAILABLE or ADMISSION_PROCEDURE_FAULT.
        message: Human-readable message.
        procedure: Name of the procedure that failed.
        infrastructure_code: STORE_* or PROCEDURE_* code.
        details: Underlying cause (error_type, error_message).
    """

    procedure: str
