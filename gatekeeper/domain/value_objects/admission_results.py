"""Admission result value objects.

Immutable results returned (inside Success) by the admission components.
"Rate limited" and "banned" are results, not errors.
"""

import math
from dataclasses import dataclass

from gatekeeper.domain.enums import AdmissionOutcome, AdmissionState
from gatekeeper.domain.value_objects.ban_record import BanRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class LimitDecision:
    """Outcome of one sliding window check.

    Attributes:
        exceeded: True when the request was rejected (no slot consumed).
        current: Count in the window after this call. Equals ``limit`` when
            exceeded, since the rejected request was not recorded.
        limit: Limit that was enforced.
        window_ms: Window the count covers.
    """

    exceeded: bool
    current: int
    limit: int
    window_ms: int = 0

    @property
    def percentage_used(self) -> int:
        """Window usage in percent, rounded half up."""
        if self.limit <= 0:
            return 0
        # Integer form of floor(current / limit * 100 + 0.5)
        return (self.current * 200 + self.limit) // (2 * self.limit)

    @property
    def remaining(self) -> int:
        """Slots left in the current window."""
        return max(self.limit - self.current, 0)

    @property
    def state(self) -> AdmissionState:
        return AdmissionState.derive(is_banned=False, exceeded=self.exceeded)


@dataclass(frozen=True, slots=True, kw_only=True)
class ViolationReport:
    """Outcome of recording one violation.

    Attributes:
        should_ban: True when violation_count >= threshold.
        violation_count: Violations in the window including this one.
        threshold: Threshold the count was compared against.
    """

    should_ban: bool
    violation_count: int
    threshold: int

    @property
    def violations_until_ban(self) -> int:
        return max(self.threshold - self.violation_count, 0)


@dataclass(frozen=True, slots=True, kw_only=True)
class BanStatus:
    """Outcome of a ban check.

    Attributes:
        is_banned: True only when a live Ban Record exists.
        ban_info: The live record, or None.
        violation_count: Violations currently in the violation window
            (0 when the window was not requested).
        remaining_ms: Milliseconds until the ban expires, None when not banned.
    """

    is_banned: bool
    ban_info: BanRecord | None = None
    violation_count: int = 0
    remaining_ms: int | None = None

    @property
    def state(self) -> AdmissionState:
        return AdmissionState.derive(is_banned=self.is_banned)

    @property
    def retry_after_seconds(self) -> int | None:
        """Whole seconds until the ban lifts (rounded up)."""
        if self.remaining_ms is None:
            return None
        return math.ceil(self.remaining_ms / 1000)


@dataclass(frozen=True, slots=True, kw_only=True)
class CooldownSignal:
    """One-shot notice that a previously limited identifier is admitted again.

    Attributes:
        identifier: Identifier that cooled down.
        limited_at_ms: Timestamp of the last limiter rejection.
        observed_at_ms: Timestamp of the allowed request that observed it.
    """

    identifier: str
    limited_at_ms: int
    observed_at_ms: int

    @property
    def quiet_ms(self) -> int:
        """Time between the last rejection and the observing request."""
        return self.observed_at_ms - self.limited_at_ms


@dataclass(frozen=True, slots=True, kw_only=True)
class AdmissionDecision:
    """Full outcome of one admission pass.

    Attributes:
        outcome: ALLOWED, WARNED, LIMITED or BANNED.
        identifier: Identifier that was checked.
        tier: Tier whose rule was applied.
        limit_decision: Limiter result (None when banned or unlimited).
        ban_status: Result of the initial ban check.
        violation_report: Set when the request was limited.
        imposed_ban: Ban written during this pass, if any.
        cooldown: Cooldown signal observed during this pass, if any.
    """

    outcome: AdmissionOutcome
    identifier: str
    tier: str
    limit_decision: LimitDecision | None = None
    ban_status: BanStatus | None = None
    violation_report: ViolationReport | None = None
    imposed_ban: BanRecord | None = None
    cooldown: CooldownSignal | None = None

    @property
    def admitted(self) -> bool:
        return self.outcome.admitted

    @property
    def state(self) -> AdmissionState:
        if self.outcome is AdmissionOutcome.BANNED:
            return AdmissionState.BANNED
        if self.outcome is AdmissionOutcome.LIMITED:
            return AdmissionState.LIMITED
        return AdmissionState.CLEAR

    @property
    def violations_until_ban(self) -> int | None:
        if self.violation_report is None:
            return None
        return self.violation_report.violations_until_ban

    @property
    def retry_after_seconds(self) -> int | None:
        """Hint for the gateway's Retry-After header.

        Banned: time left on the ban. Limited: one full window, the longest
        it can take for the oldest timestamp to slide out.
        """
        if self.imposed_ban is not None:
            return math.ceil(self.imposed_ban.duration_ms / 1000)
        if self.outcome is AdmissionOutcome.BANNED and self.ban_status is not None:
            return self.ban_status.retry_after_seconds
        if self.outcome is AdmissionOutcome.LIMITED and self.limit_decision is not None:
            return math.ceil(self.limit_decision.window_ms / 1000)
        return None
