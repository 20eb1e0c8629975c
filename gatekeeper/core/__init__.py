"""Core shared kernel.

This module provides foundational utilities used across all layers:
- Result types for railway-oriented programming
- Base error class for admission error handling
- Error codes

The core module has NO dependencies on other application layers.
"""

from gatekeeper.core.enums import ErrorCode
from gatekeeper.core.errors import DomainError
from gatekeeper.core.result import Failure, Result, Success

__all__ = [
    "DomainError",
    "ErrorCode",
    "Failure",
    "Result",
    "Success",
]
