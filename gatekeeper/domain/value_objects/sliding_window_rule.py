"""Sliding window rule and violation policy value objects.

Immutable configuration for the two trailing windows the admission core
maintains per identifier: the request window (rate limit) and the violation
window (escalation).

Usage:
    from gatekeeper.domain.value_objects import SlidingWindowRule, ViolationPolicy

    free_tier = SlidingWindowRule(limit=10, window_ms=60_000)
    policy = ViolationPolicy(threshold=5, window_ms=7 * 24 * 60 * 60 * 1000)
"""

import math
from dataclasses import dataclass


def window_ttl_seconds(window_ms: int) -> int:
    """TTL applied to a timestamp set on every write.

    Twice the window, rounded up to whole seconds, so an idle identifier's
    record is reclaimed by the store even if nothing trims it again.

    Args:
        window_ms: Window length in milliseconds.

    Returns:
        int: TTL in seconds.
    """
    return math.ceil(window_ms / 1000) * 2


@dataclass(frozen=True, slots=True, kw_only=True)
class SlidingWindowRule:
    """Rate limit rule for one tier (value object).

    Sliding Window Algorithm:
        - Every accepted request adds one timestamp to the Window Record
        - Timestamps at or before (now - window_ms) are trimmed on each access
        - A request is rejected when the remaining count is already >= limit
        - Rejected requests do not add a timestamp

    Attributes:
        limit: Inclusive cap on accepted requests per window.
        window_ms: Trailing window length in milliseconds.
        enabled: Disabled rules always admit (unlimited tiers) and never
            touch the store.

    Raises:
        ValueError: If enabled and limit <= 0, or window_ms <= 0.
    """

    limit: int
    window_ms: int
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate rule configuration after initialization.

        Raises:
            ValueError: If any numeric field is invalid.
        """
        if self.enabled and self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")

    @classmethod
    def unlimited(cls, window_ms: int = 60_000) -> "SlidingWindowRule":
        """Build a disabled rule for tiers without a request cap."""
        return cls(limit=0, window_ms=window_ms, enabled=False)

    @classmethod
    def from_requests_per_window(
        cls, requests: int, window_ms: int = 60_000
    ) -> "SlidingWindowRule":
        """Build a rule from a configured request count.

        Args:
            requests: Accepted requests per window. Negative means unlimited.
            window_ms: Window length in milliseconds.

        Returns:
            SlidingWindowRule: Enabled rule, or an unlimited one for requests < 0.
        """
        if requests < 0:
            return cls.unlimited(window_ms)
        return cls(limit=requests, window_ms=window_ms)

    @property
    def ttl_seconds(self) -> int:
        """TTL for the Window Record (2x window, whole seconds)."""
        return window_ttl_seconds(self.window_ms)


@dataclass(frozen=True, slots=True, kw_only=True)
class ViolationPolicy:
    """Violation tracking configuration (value object).

    Attributes:
        threshold: Violations within the window at which should_ban is reported.
        window_ms: Violation window in milliseconds, typically much longer
            than the rate limit window.

    Raises:
        ValueError: If threshold <= 0 or window_ms <= 0.
    """

    threshold: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.threshold <= 0:
            raise ValueError(f"threshold must be positive, got {self.threshold}")
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")

    @property
    def ttl_seconds(self) -> int:
        """TTL for the Violation Record (2x window, whole seconds)."""
        return window_ttl_seconds(self.window_ms)
