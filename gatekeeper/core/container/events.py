"""Event bus factory."""

from functools import lru_cache
from typing import TYPE_CHECKING

from gatekeeper.core.container.infrastructure import get_logger

if TYPE_CHECKING:
    from gatekeeper.domain.protocols.event_bus_protocol import EventBusProtocol


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    Handlers are subscribed by the embedding gateway at startup:

        event_bus = get_event_bus()
        event_bus.subscribe(BanImposed, notify_operators)

    Returns:
        Event bus implementing EventBusProtocol.
    """
    from gatekeeper.infrastructure.events.in_memory_event_bus import InMemoryEventBus

    return InMemoryEventBus(logger=get_logger())
