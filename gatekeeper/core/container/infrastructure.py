"""Infrastructure factories: Redis client and logger.

All factories are app-scoped singletons (lru_cache). Imports are local so
that importing the container does not import redis or structlog until a
factory is called.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from gatekeeper.core.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol


@lru_cache()
def get_redis_client() -> "Redis":
    """Get the shared Redis client (app-scoped).

    The pool keeps raw bytes (decode_responses=False); the procedure
    executor decodes replies itself.

    Returns:
        redis.asyncio.Redis bound to a connection pool.
    """
    from redis.asyncio import ConnectionPool, Redis

    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=False,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=settings.redis_socket_timeout,
        socket_keepalive=True,
    )
    return Redis(connection_pool=pool)


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from gatekeeper.infrastructure.logging.console_adapter import ConsoleAdapter

    logger = ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
    )
    return logger.bind(app=settings.app_name, environment=settings.environment.value)
