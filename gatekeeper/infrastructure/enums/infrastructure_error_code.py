"""Infrastructure-specific error codes.

These are internal codes for tracking store and procedure failures.
They are mapped to domain ErrorCode when flowing to the domain layer.

Categories:
- Store errors (STORE_*): Redis unreachable
- Procedure errors (PROCEDURE_*): Lua script faults and bad replies
- Record errors (RECORD_*): stored values that cannot be decoded
"""

from enum import Enum


class InfrastructureErrorCode(Enum):
    """Infrastructure-specific error codes."""

    # Store errors
    STORE_CONNECTION_FAILED = "store_connection_failed"
    STORE_TIMEOUT = "store_timeout"

    # Procedure errors
    PROCEDURE_RUNTIME_ERROR = "procedure_runtime_error"
    PROCEDURE_ARITY_MISMATCH = "procedure_arity_mismatch"
    PROCEDURE_REPLY_INVALID = "procedure_reply_invalid"

    # Record errors
    RECORD_DECODE_FAILED = "record_decode_failed"
