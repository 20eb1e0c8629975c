"""Ban Record value object.

The structured value stored at ``<namespace>:banned:<identifier>``. Its store
TTL equals the ban duration, so the record disappears on its own when the ban
ends. The JSON layout is the wire format shared by every gateway worker.

Wire format:
    {
        "reason": "Rate limit exceeded 5 times",
        "issued_at": 1735689600000,
        "expires_at": 1735689900000,
        "violation_count_at_ban": 5,
        "level": "5_min"
    }
"""

import json
from dataclasses import dataclass
from typing import Any

from gatekeeper.domain.enums import BanLevel


@dataclass(frozen=True, slots=True, kw_only=True)
class BanRecord:
    """Explicit, time-bounded block on an identifier.

    Attributes:
        reason: Human-readable reason shown to operators and clients.
        issued_at_ms: Epoch milliseconds when the ban was written.
        expires_at_ms: Epoch milliseconds when the ban ends.
        violation_count_at_ban: In-window violation count when imposed.
        level: Escalation level (MANUAL for direct impositions).

    Raises:
        ValueError: If expires_at_ms <= issued_at_ms or the count is negative.
    """

    reason: str
    issued_at_ms: int
    expires_at_ms: int
    violation_count_at_ban: int = 0
    level: BanLevel = BanLevel.MANUAL

    def __post_init__(self) -> None:
        if self.expires_at_ms <= self.issued_at_ms:
            raise ValueError("expires_at_ms must be after issued_at_ms")
        if self.violation_count_at_ban < 0:
            raise ValueError("violation_count_at_ban must not be negative")

    @property
    def duration_ms(self) -> int:
        """Total ban length in milliseconds."""
        return self.expires_at_ms - self.issued_at_ms

    def remaining_ms(self, now_ms: int) -> int:
        """Milliseconds until expiry (0 once expired)."""
        return max(self.expires_at_ms - now_ms, 0)

    def is_active(self, now_ms: int) -> bool:
        """Whether the ban still applies at ``now_ms``."""
        return self.expires_at_ms > now_ms

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire-format dictionary."""
        return {
            "reason": self.reason,
            "issued_at": self.issued_at_ms,
            "expires_at": self.expires_at_ms,
            "violation_count_at_ban": self.violation_count_at_ban,
            "level": self.level.value,
        }

    def to_json(self) -> str:
        """Serialize to the JSON string stored in Redis."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: str | bytes) -> "BanRecord":
        """Parse a stored Ban Record.

        Args:
            raw: JSON string (or bytes) read from the store.

        Returns:
            BanRecord: Parsed record.

        Raises:
            ValueError: If the payload is not UTF-8, not valid JSON, or
                misses fields.
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ValueError(f"ban record is not valid UTF-8: {e}") from e
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("ban record must be a JSON object")
        try:
            return cls(
                reason=str(data["reason"]),
                issued_at_ms=int(data["issued_at"]),
                expires_at_ms=int(data["expires_at"]),
                violation_count_at_ban=int(data.get("violation_count_at_ban", 0)),
                level=BanLevel(data.get("level", BanLevel.MANUAL.value)),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"ban record is missing or has invalid fields: {e}") from e
