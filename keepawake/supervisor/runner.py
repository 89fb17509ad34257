import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from keepawake.local.config import effective_settings as config
from keepawake.supervisor.assertion import Assertion, DurationUnit
from keepawake.supervisor.process_utils import ProcessLauncher
from keepawake.supervisor.registry import NamedAssertionRegistry
from keepawake.supervisor.slot import RenewableAssertionSlot

log = logging.getLogger(__name__)


class KeepAwakeRunner:
    """
    Front door for one client of the keep-awake supervisors.

    Combines a renewable slot and a named registry that share one process
    launcher, and prefixes their log lines with `source`.
    """

    def __init__(self, source: Optional[str] = None,
                 launcher: Optional[ProcessLauncher] = None,
                 clock: Callable[[], datetime] = datetime.now) -> None:
        self.source = source or config.DEFAULT_SOURCE
        self.launcher = launcher or ProcessLauncher()
        self.slot = RenewableAssertionSlot(self.launcher, clock, self.source)
        self.registry = NamedAssertionRegistry(self.launcher, clock, self.source)

    def __enter__(self) -> "KeepAwakeRunner":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release_all()

    #* --- Renewable ---
    def keep_awake(self, minutes: Optional[int] = None) -> bool:
        return self.slot.keep_awake(minutes)

    def keep_awake_seconds(self, seconds: int) -> bool:
        return self.slot.keep_awake_seconds(seconds)

    def request(self, unit: DurationUnit, amount: int) -> bool:
        return self.slot.request(unit, amount)

    def tiny(self) -> bool:
        return self.slot.tiny()

    def small(self) -> bool:
        return self.slot.small()

    def medium(self) -> bool:
        return self.slot.medium()

    #* --- Cancelable ---
    def hold(self, name: str) -> bool:
        return self.registry.start(name)

    def cancel(self, name: str) -> bool:
        return self.registry.cancel(name)

    def wait_for(self, name: str, timeout: Optional[float] = None) -> bool:
        return self.registry.wait_for(name, timeout)

    #* --- Lifecycle ---
    def status(self) -> Dict[str, Any]:
        """Returns a snapshot of both supervisors for display."""
        return {
            "source": self.source,
            "renewable": self.slot.current(),
            "cancelable": self.registry.snapshot(),
        }

    def is_idle(self) -> bool:
        return not self.slot.is_active() and not self.registry.names()

    def _live_assertions(self) -> List[Assertion]:
        live = list(self.registry.snapshot().values())
        current = self.slot.current()
        if current is not None:
            live.append(current)
        return [assertion for assertion in live if not assertion.exited.is_set()]

    def wait_until_idle(self) -> None:
        """
        Blocks until every assertion owned by this runner has ended.

        Assertions started or renewed while waiting are waited on as well.
        """
        pending = self._live_assertions()
        while pending:
            for assertion in pending:
                assertion.wait_exited()
            pending = self._live_assertions()

    def release_all(self) -> None:
        """Stops every assertion owned by this runner."""
        released = int(self.slot.release()) + self.registry.cancel_all()
        if released:
            log.info(f"{self.source}: Released {released} keep-awake assertion(s).")
        else:
            log.debug(f"{self.source}: No keep-awake assertions to release.")
