"""Domain enums package.

Usage:
    from gatekeeper.domain.enums import AdmissionState, BanLevel, RecordKind
"""

from gatekeeper.domain.enums.admission_outcome import AdmissionOutcome
from gatekeeper.domain.enums.admission_state import AdmissionState
from gatekeeper.domain.enums.ban_level import BanLevel
from gatekeeper.domain.enums.record_kind import RecordKind

__all__ = [
    "AdmissionOutcome",
    "AdmissionState",
    "BanLevel",
    "RecordKind",
]
