"""Logging adapters.

Usage:
    from gatekeeper.infrastructure.logging import ConsoleAdapter
"""

from gatekeeper.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
