"""Event bus adapters.

Usage:
    from gatekeeper.infrastructure.events import InMemoryEventBus
"""

from gatekeeper.infrastructure.events.in_memory_event_bus import InMemoryEventBus

__all__ = ["InMemoryEventBus"]
