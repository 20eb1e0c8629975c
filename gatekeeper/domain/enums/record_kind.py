"""Record kind enumeration.

The middle segment of every admission key: ``<namespace>:<kind>:<identifier>``.

Key Formats:
    WINDOW:       ratelimit:window:{identifier}                     (sorted set)
    ROUTE_WINDOW: ratelimit:route_window:{identifier}:{route_hash}  (sorted set)
    VIOLATIONS:   ratelimit:violations:{identifier}                 (sorted set)
    BANNED:       ratelimit:banned:{identifier}                     (JSON string)
    LIMITED:      ratelimit:limited:{identifier}                    (cooldown marker)
"""

from enum import Enum


class RecordKind(str, Enum):
    """Kinds of records kept in the shared store per identifier."""

    WINDOW = "window"
    ROUTE_WINDOW = "route_window"
    VIOLATIONS = "violations"
    BANNED = "banned"
    LIMITED = "limited"
