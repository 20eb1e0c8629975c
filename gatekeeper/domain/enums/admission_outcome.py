"""Admission outcome enumeration.

Outcome of a full admission pass (ban check, limiter, violation tracking).
Maps one-to-one onto the gateway's response: ALLOWED and WARNED let the
request through, LIMITED and BANNED reject it.
"""

from enum import Enum


class AdmissionOutcome(str, Enum):
    """Result category of AdmissionController.admit()."""

    ALLOWED = "allowed"
    WARNED = "warned"
    LIMITED = "limited"
    BANNED = "banned"

    @property
    def admitted(self) -> bool:
        """Whether the gateway should let the request through."""
        return self in (AdmissionOutcome.ALLOWED, AdmissionOutcome.WARNED)
