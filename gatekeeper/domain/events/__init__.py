"""Domain events package.

Usage:
    from gatekeeper.domain.events import BanImposed, DomainEvent
"""

from gatekeeper.domain.events.admission_events import (
    BanImposed,
    BannedRequestRejected,
    RateLimitCooldownExpired,
    RateLimitExceeded,
)
from gatekeeper.domain.events.base_event import DomainEvent

__all__ = [
    "BanImposed",
    "BannedRequestRejected",
    "DomainEvent",
    "RateLimitCooldownExpired",
    "RateLimitExceeded",
]
