"""Ban escalation policy value object.

Maps an in-window violation count to a ban level and duration. The ladder is
evaluated from the highest threshold down, so an identifier that racks up
violations quickly lands directly on the longer ban.

Default ladder:
    >= 5 violations  -> FIVE_MINUTES (5 minutes)
    >= 7 violations  -> ONE_DAY      (24 hours)
    >= 12 violations -> PERMANENT    (999 days)

Usage:
    policy = BanEscalationPolicy.default()
    step = policy.step_for(violation_count=7)
    assert step.level is BanLevel.ONE_DAY
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from gatekeeper.domain.enums import BanLevel

if TYPE_CHECKING:
    from gatekeeper.core.config import Settings


@dataclass(frozen=True, slots=True, kw_only=True)
class BanStep:
    """One rung of the escalation ladder.

    Attributes:
        level: Ban level written to the Ban Record.
        threshold: Minimum in-window violations for this rung.
        duration_ms: Ban duration (and store TTL) in milliseconds.
    """

    level: BanLevel
    threshold: int
    duration_ms: int

    def __post_init__(self) -> None:
        if self.threshold <= 0:
            raise ValueError(f"threshold must be positive, got {self.threshold}")
        if self.duration_ms <= 0:
            raise ValueError(f"duration_ms must be positive, got {self.duration_ms}")

    def reason(self, violation_count: int) -> str:
        """Reason stored on the Ban Record."""
        return f"Rate limit exceeded {violation_count} times"


@dataclass(frozen=True, slots=True, kw_only=True)
class BanEscalationPolicy:
    """Ordered escalation ladder (value object).

    Attributes:
        steps: Rungs in strictly ascending threshold order.

    Raises:
        ValueError: If empty or thresholds are not strictly ascending.
    """

    steps: tuple[BanStep, ...]

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError("escalation policy needs at least one step")
        thresholds = [step.threshold for step in self.steps]
        if any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError("step thresholds must be strictly ascending")

    @property
    def first_threshold(self) -> int:
        """Violation count at which the first ban applies."""
        return self.steps[0].threshold

    def step_for(self, violation_count: int) -> BanStep | None:
        """Return the highest rung reached by ``violation_count``.

        Args:
            violation_count: Violations currently in the window.

        Returns:
            BanStep | None: None when below the first threshold.
        """
        for step in reversed(self.steps):
            if violation_count >= step.threshold:
                return step
        return None

    def violations_until_ban(self, violation_count: int) -> int:
        """Violations left before the first ban (0 once reached)."""
        return max(self.first_threshold - violation_count, 0)

    @classmethod
    def default(cls) -> "BanEscalationPolicy":
        """The production ladder: 5 min, 1 day, permanent."""
        return cls(
            steps=(
                BanStep(level=BanLevel.FIVE_MINUTES, threshold=5, duration_ms=5 * 60 * 1000),
                BanStep(level=BanLevel.ONE_DAY, threshold=7, duration_ms=24 * 60 * 60 * 1000),
                BanStep(
                    level=BanLevel.PERMANENT,
                    threshold=12,
                    duration_ms=999 * 24 * 60 * 60 * 1000,
                ),
            )
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BanEscalationPolicy":
        """Build the ladder from configured thresholds and durations."""
        return cls(
            steps=(
                BanStep(
                    level=BanLevel.FIVE_MINUTES,
                    threshold=settings.ban_threshold_first,
                    duration_ms=settings.ban_duration_first_seconds * 1000,
                ),
                BanStep(
                    level=BanLevel.ONE_DAY,
                    threshold=settings.ban_threshold_second,
                    duration_ms=settings.ban_duration_second_seconds * 1000,
                ),
                BanStep(
                    level=BanLevel.PERMANENT,
                    threshold=settings.ban_threshold_permanent,
                    duration_ms=settings.ban_duration_permanent_seconds * 1000,
                ),
            )
        )
