"""Base domain event class.

Domain events represent "things that happened" in the admission core and are
named in past tense (RateLimitExceeded, BanImposed).

Architecture:
    - Frozen dataclass (immutable after creation)
    - Auto-generated event_id (UUID) for event tracking
    - occurred_at timestamp (UTC) for event ordering

Usage:
    >>> @dataclass(frozen=True, kw_only=True, slots=True)
    >>> class BanImposed(DomainEvent):
    ...     identifier: str
    >>>
    >>> event = BanImposed(identifier="ox_abc")
    >>> print(event.event_id)  # Auto-generated UUID
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """Base class for all domain events.

    All domain events MUST:
        1. Inherit from this base class
        2. Use past tense naming
        3. Be frozen, kw_only dataclasses
        4. Carry the data handlers need (identifier, counts, levels)

    Attributes:
        event_id: Unique identifier for this event instance.
        occurred_at: Timestamp when the event occurred (UTC).
    """

    event_id: UUID = field(default_factory=uuid4)
    """Unique identifier for this event instance (UUID v4)."""

    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    """Timestamp when the event occurred, always UTC."""
