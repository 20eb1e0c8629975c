"""Event bus protocol (port) for domain events.

Architecture:
    - Protocol (structural typing, NOT ABC inheritance)
    - Domain layer defines the interface
    - Infrastructure provides InMemoryEventBus
    - Container (gatekeeper/core/container.py) provides the factory

Usage:
    >>> from gatekeeper.core.container import get_event_bus
    >>> from gatekeeper.domain.events import BanImposed
    >>>
    >>> event_bus = get_event_bus()
    >>>
    >>> async def alert_on_ban(event: BanImposed) -> None:
    ...     await pager.notify(event.identifier)
    >>>
    >>> event_bus.subscribe(BanImposed, alert_on_ban)
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from gatekeeper.domain.events.base_event import DomainEvent

# Type alias for event handler functions
EventHandler = Callable[[DomainEvent], Awaitable[None]]
"""Async handler: accepts one event, returns None, side effects only."""


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations.

    Key Requirements:
        1. **Fail-open behavior**: One handler failure must NOT prevent other
           handlers from executing. Log errors but continue processing.
        2. **Async support**: All handlers are async.
        3. **Type routing**: Handlers receive only the exact event type they
           subscribed to.
        4. **No ordering guarantees**: Handlers execute concurrently.
    """

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register event handler for specific event type.

        Args:
            event_type: Class of event to handle (exact type, no inheritance
                matching).
            handler: Async function called with the event instance.
        """
        ...

    async def publish(
        self,
        event: DomainEvent,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Publish event to all registered handlers.

        Handler exceptions are logged and NOT propagated to the publisher.
        No handlers registered is a no-op.

        Args:
            event: Domain event to publish.
            metadata: Optional request metadata (route, worker id) that
                handlers can read via get_metadata().
        """
        ...
