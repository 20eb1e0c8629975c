"""Atomic procedures used by the admission components.

Each constant declares one Lua script from ``lua_scripts/`` and its arity.
The executor rejects calls whose key or argument count does not match.
"""

from gatekeeper.infrastructure.admission.procedure_executor import AtomicProcedure

SLIDING_WINDOW = AtomicProcedure(
    name="sliding_window",
    script="sliding_window.lua",
    key_count=1,
    arg_count=5,
    reply_arity=3,
)

RECORD_VIOLATION = AtomicProcedure(
    name="record_violation",
    script="record_violation.lua",
    key_count=1,
    arg_count=5,
    reply_arity=2,
)

CHECK_BAN = AtomicProcedure(
    name="check_ban",
    script="check_ban.lua",
    key_count=2,
    arg_count=1,
    reply_arity=4,
)

IMPOSE_BAN = AtomicProcedure(
    name="impose_ban",
    script="impose_ban.lua",
    key_count=1,
    arg_count=2,
    reply_arity=1,
)

MARK_LIMITED = AtomicProcedure(
    name="mark_limited",
    script="mark_limited.lua",
    key_count=1,
    arg_count=2,
    reply_arity=1,
)

CLEAR_COOLDOWN = AtomicProcedure(
    name="clear_cooldown",
    script="clear_cooldown.lua",
    key_count=1,
    arg_count=2,
    reply_arity=2,
)
