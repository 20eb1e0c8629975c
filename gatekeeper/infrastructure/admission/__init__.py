"""Admission core: sliding window limiter, violation tracker and bans.

Usage:
    from gatekeeper.core.container import get_admission_controller

    admission = get_admission_controller()
    result = await admission.admit("ox_abc", tier="pro")
"""

from gatekeeper.infrastructure.admission.admission_controller import (
    DEFAULT_TIER,
    AdmissionController,
    build_tier_rules,
)
from gatekeeper.infrastructure.admission.ban_state_machine import BanStateMachine
from gatekeeper.infrastructure.admission.cooldown_observer import CooldownObserver
from gatekeeper.infrastructure.admission.keys import AdmissionKeys, current_time_ms
from gatekeeper.infrastructure.admission.procedure_executor import (
    AtomicProcedure,
    ProcedureExecutor,
)
from gatekeeper.infrastructure.admission.sliding_window_limiter import (
    SlidingWindowLimiter,
)
from gatekeeper.infrastructure.admission.violation_tracker import ViolationTracker

__all__ = [
    "DEFAULT_TIER",
    "AdmissionController",
    "AdmissionKeys",
    "AtomicProcedure",
    "BanStateMachine",
    "CooldownObserver",
    "ProcedureExecutor",
    "SlidingWindowLimiter",
    "ViolationTracker",
    "build_tier_rules",
    "current_time_ms",
]
