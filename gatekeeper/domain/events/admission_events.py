"""Admission domain events.

Published by AdmissionController after the corresponding store write has
succeeded. Publishing failures never change an admission decision.

Events:
- RateLimitExceeded: limiter rejected a request (violation recorded)
- BanImposed: a Ban Record was written by the escalation ladder
- BannedRequestRejected: a request hit a live Ban Record
- RateLimitCooldownExpired: a previously limited identifier was admitted again
"""

from dataclasses import dataclass

from gatekeeper.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True)
class RateLimitExceeded(DomainEvent):
    """Request rejected because the sliding window was full.

    Attributes:
        identifier: Identifier that was limited.
        tier: Tier whose rule was enforced.
        route: Route scope of the window, if any.
        current: Count in the window (equals limit).
        limit: Enforced limit.
        violation_count: Violations in the violation window, this one included.
        violations_until_ban: Violations left before the first ban.
    """

    identifier: str
    tier: str
    route: str | None
    current: int
    limit: int
    violation_count: int
    violations_until_ban: int


@dataclass(frozen=True, kw_only=True)
class BanImposed(DomainEvent):
    """Ban Record written after repeated violations.

    Attributes:
        identifier: Identifier that was banned.
        level: Ban level value ("5_min", "1_day", "permanent").
        reason: Reason stored on the record.
        violation_count: Violations in the window at ban time.
        expires_at_ms: Epoch milliseconds when the ban ends.
    """

    identifier: str
    level: str
    reason: str
    violation_count: int
    expires_at_ms: int


@dataclass(frozen=True, kw_only=True)
class BannedRequestRejected(DomainEvent):
    """Request rejected by a live Ban Record.

    Attributes:
        identifier: Banned identifier.
        reason: Reason from the Ban Record.
        remaining_ms: Milliseconds until the ban expires.
    """

    identifier: str
    reason: str
    remaining_ms: int


@dataclass(frozen=True, kw_only=True)
class RateLimitCooldownExpired(DomainEvent):
    """Previously limited identifier admitted again after a full window.

    Attributes:
        identifier: Identifier that cooled down.
        limited_at_ms: Timestamp of the last rejection.
        quiet_ms: Time between that rejection and the admitted request.
    """

    identifier: str
    limited_at_ms: int
    quiet_ms: int
