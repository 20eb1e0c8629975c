"""Domain value objects.

Usage:
    from gatekeeper.domain.value_objects import (
        BanRecord,
        LimitDecision,
        SlidingWindowRule,
    )
"""

from gatekeeper.domain.value_objects.admission_results import (
    AdmissionDecision,
    BanStatus,
    CooldownSignal,
    LimitDecision,
    ViolationReport,
)
from gatekeeper.domain.value_objects.ban_escalation_policy import (
    BanEscalationPolicy,
    BanStep,
)
from gatekeeper.domain.value_objects.ban_record import BanRecord
from gatekeeper.domain.value_objects.sliding_window_rule import (
    SlidingWindowRule,
    ViolationPolicy,
    window_ttl_seconds,
)

__all__ = [
    "AdmissionDecision",
    "BanEscalationPolicy",
    "BanRecord",
    "BanStatus",
    "BanStep",
    "CooldownSignal",
    "LimitDecision",
    "SlidingWindowRule",
    "ViolationPolicy",
    "ViolationReport",
    "window_ttl_seconds",
]
