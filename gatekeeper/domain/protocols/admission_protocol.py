"""Admission protocol (port) for the gateway.

The gateway consumes the admission core through this contract. Each of the
four primitive operations is one round trip to the shared store and none of
them requires a client-side lock, so any number of gateway workers can call
them concurrently against the same identifier.

Following hexagonal architecture:
- Domain defines the PORT (this protocol)
- Infrastructure provides the ADAPTER (AdmissionController)
- Gateway code depends on the protocol only

Usage:
    from gatekeeper.core.container import get_admission_controller
    from gatekeeper.domain.protocols import AdmissionProtocol

    admission: AdmissionProtocol = get_admission_controller()
    result = await admission.admit("ox_abc", tier="pro")

    match result:
        case Success(value=decision) if decision.admitted:
            ...
        case Success(value=decision):
            return 429, {"Retry-After": str(decision.retry_after_seconds)}
        case Failure(error=error):
            # The core never chooses fail-open or fail-closed
            ...
"""

from typing import Protocol

from gatekeeper.core.result import Result
from gatekeeper.domain.enums import BanLevel
from gatekeeper.domain.errors import AdmissionError
from gatekeeper.domain.value_objects import (
    AdmissionDecision,
    BanRecord,
    BanStatus,
    LimitDecision,
    ViolationReport,
)


class AdmissionProtocol(Protocol):
    """Protocol for the admission core.

    Rate limited and banned are successful results. Failure is returned only
    when the core could not determine the state (store unreachable, procedure
    fault, malformed Ban Record).
    """

    async def check_banned(
        self,
        identifier: str,
        *,
        violation_window_ms: int | None = None,
        now_ms: int | None = None,
    ) -> Result[BanStatus, AdmissionError]:
        """Read the ban state (and optionally the violation count) atomically."""
        ...

    async def check_and_consume(
        self,
        identifier: str,
        limit: int,
        window_ms: int,
        *,
        route: str | None = None,
        now_ms: int | None = None,
    ) -> Result[LimitDecision, AdmissionError]:
        """Admit-and-record or reject in one atomic step."""
        ...

    async def record_violation(
        self,
        identifier: str,
        threshold: int,
        window_ms: int,
        *,
        now_ms: int | None = None,
    ) -> Result[ViolationReport, AdmissionError]:
        """Append a violation and report whether the threshold is reached."""
        ...

    async def impose(
        self,
        identifier: str,
        reason: str,
        duration_ms: int,
        *,
        violation_count: int = 0,
        level: BanLevel | None = None,
        now_ms: int | None = None,
    ) -> Result[BanRecord, AdmissionError]:
        """Write a Ban Record whose store TTL equals the duration."""
        ...

    async def admit(
        self,
        identifier: str,
        *,
        tier: str = "free",
        route: str | None = None,
        now_ms: int | None = None,
    ) -> Result[AdmissionDecision, AdmissionError]:
        """Run the full admission flow for one request."""
        ...

    async def clear(self, identifier: str) -> Result[int, AdmissionError]:
        """Delete every admission record for an identifier."""
        ...
