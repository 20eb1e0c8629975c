"""Gatekeeper admission-control core.

Sliding-window rate limiting and violation-escalation bans for an API gateway,
enforced through atomic Redis Lua procedures so that any number of gateway
workers share one consistent limit.
"""

__version__ = "0.1.0"
