"""Admission core factories."""

from functools import lru_cache
from typing import TYPE_CHECKING

from gatekeeper.core.config import settings
from gatekeeper.core.container.events import get_event_bus
from gatekeeper.core.container.infrastructure import get_logger, get_redis_client

if TYPE_CHECKING:
    from gatekeeper.infrastructure.admission import (
        AdmissionController,
        ProcedureExecutor,
    )


@lru_cache()
def get_procedure_executor() -> "ProcedureExecutor":
    """Get the procedure executor singleton.

    One executor per process, so every component shares the cached script
    SHAs and the script-load lock.
    """
    from gatekeeper.infrastructure.admission import ProcedureExecutor

    return ProcedureExecutor(
        redis_client=get_redis_client(),
        logger=get_logger().bind(component="procedure_executor"),
    )


@lru_cache()
def get_admission_controller() -> "AdmissionController":
    """Get the admission controller singleton (app-scoped).

    Creates AdmissionController with:
    - SlidingWindowLimiter, ViolationTracker, BanStateMachine, CooldownObserver
      sharing one ProcedureExecutor
    - Tier rules and the ban escalation ladder from Settings
    - Event bus for domain event publishing
    - Logger for structured logging

    Returns:
        Admission controller implementing AdmissionProtocol.
    """
    from gatekeeper.domain.value_objects import BanEscalationPolicy
    from gatekeeper.infrastructure.admission import (
        AdmissionController,
        AdmissionKeys,
        BanStateMachine,
        CooldownObserver,
        SlidingWindowLimiter,
        ViolationTracker,
        build_tier_rules,
    )

    executor = get_procedure_executor()
    keys = AdmissionKeys(namespace=settings.admission_namespace)
    logger = get_logger()

    return AdmissionController(
        executor=executor,
        keys=keys,
        limiter=SlidingWindowLimiter(
            executor=executor,
            keys=keys,
            logger=logger.bind(component="sliding_window_limiter"),
        ),
        tracker=ViolationTracker(
            executor=executor,
            keys=keys,
            logger=logger.bind(component="violation_tracker"),
        ),
        bans=BanStateMachine(
            executor=executor,
            keys=keys,
            logger=logger.bind(component="ban_state_machine"),
        ),
        cooldown=CooldownObserver(
            executor=executor,
            keys=keys,
            logger=logger.bind(component="cooldown_observer"),
            marker_ttl_seconds=settings.cooldown_marker_ttl_seconds,
        ),
        rules=build_tier_rules(settings),
        escalation=BanEscalationPolicy.from_settings(settings),
        violation_window_ms=settings.violation_window_ms,
        warn_percentage=settings.warn_percentage,
        event_bus=get_event_bus(),
        logger=logger.bind(component="admission_controller"),
    )
