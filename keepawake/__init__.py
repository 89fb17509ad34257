"""
keepawake: supervises OS keep-awake assertions held by short-lived
`caffeinate`/`systemd-inhibit` processes.
"""

from keepawake.supervisor import (
    DurationUnit,
    KeepAwakeRunner,
    NamedAssertionRegistry,
    RenewableAssertionSlot,
)

__all__ = ["DurationUnit", "KeepAwakeRunner", "NamedAssertionRegistry", "RenewableAssertionSlot"]
