"""LoggerProtocol definition for structured logging.

This protocol standardizes structured logging across the admission core while
remaining backend-agnostic. Implementations MUST keep logs structured
(key-value context).

Log Levels:
    - DEBUG: Per-request decisions (allowed, current count)
    - INFO: Bans imposed, cooldowns observed
    - WARNING: Limited requests, banned requests, event publish failures
    - ERROR: Store or procedure failures
    - CRITICAL: Reserved for process-wide failures

Usage:
    from gatekeeper.core.container import get_logger
    from gatekeeper.domain.protocols import LoggerProtocol

    logger: LoggerProtocol = get_logger()
    logger.warning("rate_limit_exceeded", identifier=identifier, limit=10)

    scoped = logger.bind(component="ban_state_machine")
    scoped.info("ban_imposed", identifier=identifier)
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    All logging calls MUST be structured: message + key-value context.
    """

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Event name or short message (avoid f-strings; use context).
            error: Optional exception; implementations add error_type and
                error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message."""
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return new logger with permanently bound context.

        The original logger is unchanged.
        """
        ...

    def with_context(self, **context: Any) -> LoggerProtocol:
        """Alias for bind()."""
        ...
