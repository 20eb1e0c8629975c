"""Admission state enumeration.

The CLEAR / LIMITED / BANNED lifecycle is never stored as a tag. It is derived
from which records exist for an identifier at the moment of a check:

    CLEAR   -> no live Ban Record, limiter admitted the request
    LIMITED -> no live Ban Record, limiter reported the window full (transient)
    BANNED  -> a live Ban Record exists (limiter and tracker are not consulted)

After a ban expires the identifier returns to CLEAR on its own, because the
store deletes the Ban Record when its TTL runs out.

Usage:
    from gatekeeper.domain.enums import AdmissionState

    state = AdmissionState.derive(is_banned=False, exceeded=True)
    assert state is AdmissionState.LIMITED
"""

from enum import Enum


class AdmissionState(str, Enum):
    """Admission state of an identifier, derived from record presence."""

    CLEAR = "clear"
    """No live ban and the current window has room."""

    LIMITED = "limited"
    """Window is full. Transient: not persisted, clears as the window slides."""

    BANNED = "banned"
    """A live Ban Record exists. Overrides every other check."""

    @classmethod
    def derive(cls, *, is_banned: bool, exceeded: bool = False) -> "AdmissionState":
        """Derive the state from the outcome of the ban check and limiter.

        Args:
            is_banned: Whether a live Ban Record exists.
            exceeded: Whether the limiter reported the window full. Ignored
                when ``is_banned`` is True.

        Returns:
            AdmissionState: BANNED takes precedence over LIMITED.
        """
        if is_banned:
            return cls.BANNED
        if exceeded:
            return cls.LIMITED
        return cls.CLEAR
