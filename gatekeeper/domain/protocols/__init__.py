"""Domain protocols (ports).

Usage:
    from gatekeeper.domain.protocols import AdmissionProtocol, LoggerProtocol
"""

from gatekeeper.domain.protocols.admission_protocol import AdmissionProtocol
from gatekeeper.domain.protocols.event_bus_protocol import (
    EventBusProtocol,
    EventHandler,
)
from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol

__all__ = [
    "AdmissionProtocol",
    "EventBusProtocol",
    "EventHandler",
    "LoggerProtocol",
]
