"""In-memory event bus implementation.

Implements EventBusProtocol with a dictionary-based registry. Each gateway
worker owns one bus; events are not shared across workers.

Usage:
    >>> bus = InMemoryEventBus(logger=get_logger())
    >>> bus.subscribe(BanImposed, alert_on_ban)
    >>> await bus.publish(BanImposed(identifier="ox_abc", ...))
"""

import asyncio
from collections import defaultdict

from gatekeeper.domain.events.base_event import DomainEvent
from gatekeeper.domain.protocols.event_bus_protocol import EventHandler
from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol


class InMemoryEventBus:
    """In-memory event bus with fail-open behavior.

    Handlers for an event type run concurrently with asyncio.gather; one
    handler failure is logged and does not prevent the others.

    Attributes:
        _handlers: Event type -> list of async handlers.
        _metadata: Metadata of the event currently being published.
        _logger: Logger for handler failures.
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._metadata: dict[str, str] = {}
        self._logger = logger

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register event handler for an exact event type.

        No duplicate detection: registering the same handler twice calls it
        twice.
        """
        self._handlers[event_type].append(handler)

    def handler_count(self, event_type: type[DomainEvent]) -> int:
        return len(self._handlers.get(event_type, []))

    def get_metadata(self) -> dict[str, str]:
        """Metadata passed to the publish() call currently running."""
        return dict(self._metadata)

    async def publish(
        self,
        event: DomainEvent,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Publish event to all registered handlers.

        Flow:
            1. Look up handlers for type(event)
            2. If no handlers, return immediately (no-op)
            3. Execute all handlers with asyncio.gather(return_exceptions=True)
            4. Log any handler exceptions (warning level)
            5. Return (never raise exceptions)

        Args:
            event: Domain event to publish.
            metadata: Optional request metadata for handlers.
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        if not handlers:
            return

        self._metadata = metadata or {}
        self._logger.debug(
            "event_publishing",
            event_type=event_type.__name__,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        try:
            results = await asyncio.gather(
                *(handler(event) for handler in handlers),
                return_exceptions=True,
            )
        finally:
            self._metadata = {}

        for idx, result in enumerate(results):
            if isinstance(result, Exception):
                handler_name = getattr(handlers[idx], "__name__", repr(handlers[idx]))
                self._logger.warning(
                    "event_handler_failed",
                    event_type=event_type.__name__,
                    event_id=str(event.event_id),
                    handler_name=handler_name,
                    error_type=type(result).__name__,
                    error_message=str(result),
                )
