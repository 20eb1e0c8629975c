"""Infrastructure errors.

Usage:
    from gatekeeper.infrastructure.errors import ExecutionError
"""

from gatekeeper.infrastructure.errors.infrastructure_error import (
    ExecutionError,
    InfrastructureError,
)

__all__ = ["ExecutionError", "InfrastructureError"]
