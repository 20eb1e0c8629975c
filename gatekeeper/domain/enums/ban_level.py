"""Ban level enumeration.

Levels of the violation escalation ladder. Values are stored inside the Ban
Record JSON, so they must stay stable.

Escalation (defaults, see Settings):
    FIVE_MINUTES: 5 violations in the violation window
    ONE_DAY:      7 violations
    PERMANENT:    12 violations (999-day TTL; still expires in the store)
    MANUAL:       imposed directly through BanStateMachine.impose()
"""

from enum import Enum


class BanLevel(str, Enum):
    """Escalation level recorded on a Ban Record."""

    FIVE_MINUTES = "5_min"
    ONE_DAY = "1_day"
    PERMANENT = "permanent"
    MANUAL = "manual"
