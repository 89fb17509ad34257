import logging
import threading
import psutil
from datetime import datetime
from typing import Callable, Optional

from keepawake.local.config import effective_settings as config
from keepawake.supervisor.assertion import Assertion, DurationUnit
from keepawake.supervisor.process_utils import ProcessLauncher, SpawnError, build_assertion_command
from keepawake.supervisor.watcher import start_exit_watcher, terminate_assertion

log = logging.getLogger(__name__)


class RenewableAssertionSlot:
    """
    Holds at most one keep-awake assertion and extends it as requests arrive.

    A request that is already covered by the running assertion is a no-op;
    anything reaching further replaces it. The old process is destroyed and
    confirmed dead before the new one is installed, so the slot never owns
    two processes.
    """

    def __init__(self, launcher: Optional[ProcessLauncher] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 source: Optional[str] = None) -> None:
        self.launcher = launcher or ProcessLauncher()
        self.clock = clock
        self.source = source or config.DEFAULT_SOURCE
        self._lock = threading.Lock()
        self._assertion: Optional[Assertion] = None
        self._active = False

    def request(self, unit: DurationUnit, amount: int) -> bool:
        """
        Keeps the system awake for `amount` units from now.

        :param unit: The unit of `amount`.
        :param amount: How long the system must stay awake.
        :return: False only if the keep-awake process could not be spawned.
        """
        if amount <= 0:
            raise ValueError(f"Keep-awake duration must be positive, got {amount}.")

        with self._lock:
            new_until = self.clock() + unit.to_timedelta(amount)
            if self._active and self._assertion.expires_at > new_until:
                log.debug(f"{self.source}: Keep-awake already running until {self._assertion.describe_until()}")
                return True

            try:
                command = build_assertion_command(unit.to_seconds(amount))
                log.info(f"{self.source}: Starting {' '.join(command)} until {new_until:%H:%M:%S}")
                handle = self.launcher.spawn(command, label=self.source)
            except SpawnError as e:
                log.error(f"{self.source}: Failed to start keep-awake process: {e}")
                return False

            if self._assertion is not None:
                self._destroy_previous(self._assertion)

            assertion = Assertion(handle, new_until)
            self._assertion = assertion
            self._active = True
            start_exit_watcher(self.launcher, assertion, self._on_exit)
        return True

    def _destroy_previous(self, previous: Assertion) -> None:
        """Tears down a replaced assertion. Failures are logged; the replacement proceeds."""
        try:
            terminate_assertion(self.launcher, previous, config.GRACEFUL_SHUTDOWN_TIMEOUT)
        except (psutil.Error, OSError) as e:
            log.warning(f"{self.source}: Could not stop replaced keep-awake {previous!r}: {e}")

    def _on_exit(self, assertion: Assertion, status: Optional[int]) -> None:
        """Watcher callback. Only the currently installed assertion may clear the flag."""
        with self._lock:
            is_current = self._assertion is assertion
            if is_current:
                self._active = False

        status_text = "unknown" if status is None else status
        if is_current:
            log.info(f"{self.source}: Keep-awake exited ({status_text}) was until {assertion.describe_until()}")
        else:
            log.debug(f"{self.source}: Replaced keep-awake exited ({status_text}) was until {assertion.describe_until()}")

    def release(self) -> bool:
        """
        Destroys the active assertion, if any, and returns the slot to idle.

        :return: True if an assertion was released.
        """
        with self._lock:
            if not self._active:
                return False
            log.info(f"{self.source}: Releasing keep-awake until {self._assertion.describe_until()}")
            self._destroy_previous(self._assertion)
            self._active = False
        return True

    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def current(self) -> Optional[Assertion]:
        with self._lock:
            return self._assertion if self._active else None

    @property
    def expires_at(self) -> Optional[datetime]:
        """The expiry of the active assertion, or None when idle."""
        assertion = self.current()
        return assertion.expires_at if assertion else None

    #* --- Presets ---
    def keep_awake(self, minutes: Optional[int] = None) -> bool:
        return self.request(DurationUnit.MINUTES, config.DEFAULT_TIMEOUT_MINUTES if minutes is None else minutes)

    def keep_awake_seconds(self, seconds: int) -> bool:
        return self.request(DurationUnit.SECONDS, seconds)

    def tiny(self) -> bool:
        return self.request(DurationUnit.MINUTES, config.TINY_TIMEOUT_MINUTES)

    def small(self) -> bool:
        return self.request(DurationUnit.MINUTES, config.SMALL_TIMEOUT_MINUTES)

    def medium(self) -> bool:
        return self.request(DurationUnit.MINUTES, config.MEDIUM_TIMEOUT_MINUTES)
