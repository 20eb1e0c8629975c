"""Infrastructure enums.

Usage:
    from gatekeeper.infrastructure.enums import InfrastructureErrorCode
"""

from gatekeeper.infrastructure.enums.infrastructure_error_code import (
    InfrastructureErrorCode,
)

__all__ = ["InfrastructureErrorCode"]
