"""Redis key shaping for admission records.

Key Format:
    {namespace}:{kind}:{identifier}
    {namespace}:route_window:{identifier}:{route_hash}

Examples:
    ratelimit:window:ox_abc                           (sorted set, tier-wide window)
    ratelimit:route_window:ox_abc:3f2a9c0d41b7e856    (sorted set, route-scoped window)
    ratelimit:violations:ox_abc                       (sorted set)
    ratelimit:banned:ox_abc                           (JSON string)
    ratelimit:limited:ox_abc                          (cooldown marker)

The identifier is opaque and used only as a suffix. Nothing parses it back
out of a key. Route-scoped windows end in a fixed-length hex digest of the
route, so an identifier containing ``:`` can never produce another
identifier's route key, and the SCAN pattern for one identifier's routes
matches no other identifier.
"""

import hashlib
import re
from dataclasses import dataclass
from time import time
from uuid import uuid4

from gatekeeper.domain.enums import RecordKind

ROUTE_HASH_LENGTH = 16

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def current_time_ms() -> int:
    """Wall clock in epoch milliseconds."""
    return int(time() * 1000)


def unique_member(now_ms: int) -> str:
    """Sorted set member for one arrival.

    The score already carries the timestamp; the random suffix keeps two
    arrivals in the same millisecond from collapsing into one member.
    """
    return f"{now_ms}-{uuid4().hex}"


def route_hash(route: str) -> str:
    """Fixed-length hex digest of a route (SHA-256, truncated)."""
    return hashlib.sha256(route.encode("utf-8")).hexdigest()[:ROUTE_HASH_LENGTH]


@dataclass(frozen=True, slots=True)
class AdmissionKeys:
    """Builds the keys for one namespace.

    Attributes:
        namespace: Key prefix shared by every gateway worker.
    """

    namespace: str = "ratelimit"

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ValueError("namespace must not be empty")

    def build(self, kind: RecordKind, identifier: str) -> str:
        return f"{self.namespace}:{kind.value}:{identifier}"

    def window(self, identifier: str, route: str | None = None) -> str:
        if route:
            key = self.build(RecordKind.ROUTE_WINDOW, identifier)
            return f"{key}:{route_hash(route)}"
        return self.build(RecordKind.WINDOW, identifier)

    def violations(self, identifier: str) -> str:
        return self.build(RecordKind.VIOLATIONS, identifier)

    def banned(self, identifier: str) -> str:
        return self.build(RecordKind.BANNED, identifier)

    def limited(self, identifier: str) -> str:
        return self.build(RecordKind.LIMITED, identifier)

    def records_for(self, identifier: str) -> list[str]:
        """Every fixed-name record of an identifier (route windows excluded)."""
        return [
            self.window(identifier),
            self.violations(identifier),
            self.banned(identifier),
            self.limited(identifier),
        ]

    def route_windows_pattern(self, identifier: str) -> str:
        """SCAN pattern matching exactly the identifier's route-scoped windows.

        Glob metacharacters inside the identifier are escaped, and the route
        digest is matched with one ``?`` per character, so ``a`` never matches
        the keys of ``a:b`` or ``a*``.
        """
        prefix = self.build(RecordKind.ROUTE_WINDOW, identifier)
        escaped = _GLOB_SPECIAL.sub(r"\\\1", prefix)
        return f"{escaped}:{'?' * ROUTE_HASH_LENGTH}"
