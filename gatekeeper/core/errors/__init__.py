"""Core errors package.

Usage:
    from gatekeeper.core.errors import DomainError
"""

from gatekeeper.core.errors.domain_error import DomainError

__all__ = ["DomainError"]
