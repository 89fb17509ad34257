"""
The Supervisor package.
Manages the lifecycle of keep-awake assertion processes.

This package contains the renewable slot, the named registry and the exit
watchers that keep their state consistent with the real processes, plus the
KeepAwakeRunner facade combining both supervision modes.
"""
from .assertion import Assertion, DurationUnit
from .process_utils import ProcessLauncher, SpawnError
from .registry import NamedAssertionRegistry
from .runner import KeepAwakeRunner
from .slot import RenewableAssertionSlot

__all__ = [
    'Assertion',
    'DurationUnit',
    'KeepAwakeRunner',
    'NamedAssertionRegistry',
    'ProcessLauncher',
    'RenewableAssertionSlot',
    'SpawnError',
]
