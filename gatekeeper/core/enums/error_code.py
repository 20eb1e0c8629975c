"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.

Categories:
- Validation errors (INVALID_*, VALIDATION_*)
- Admission errors (ADMISSION_*): the three failure kinds the admission core
  surfaces to the gateway. None of them is ever interpreted as "allowed" or
  "not banned" by the core itself.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable).

    Error codes follow ENTITY_ACTION_REASON naming convention.
    """

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    INVALID_INPUT = "invalid_input"

    # Admission errors
    ADMISSION_STORE_UNAVAILABLE = "admission_store_unavailable"
    ADMISSION_PROCEDURE_FAULT = "admission_procedure_fault"
    ADMISSION_RECORD_MALFORMED = "admission_record_malformed"
