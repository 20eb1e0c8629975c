"""Container module - centralized dependency injection.

Re-exports the factory functions from submodules:

    from gatekeeper.core.container import get_admission_controller, get_logger

The container is organized into modules by concern:
- infrastructure: Redis client and logger
- events: Event bus
- admission: Procedure executor and admission controller
"""

from gatekeeper.core.container.admission import (
    get_admission_controller,
    get_procedure_executor,
)
from gatekeeper.core.container.events import get_event_bus
from gatekeeper.core.container.infrastructure import get_logger, get_redis_client

__all__ = [
    "get_admission_controller",
    "get_event_bus",
    "get_logger",
    "get_procedure_executor",
    "get_redis_client",
]
