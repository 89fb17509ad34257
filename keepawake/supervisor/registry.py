import logging
import threading
import psutil
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from keepawake.local.config import effective_settings as config
from keepawake.supervisor.assertion import Assertion
from keepawake.supervisor.process_utils import ProcessLauncher, SpawnError, build_assertion_command
from keepawake.supervisor.watcher import start_exit_watcher, terminate_assertion

log = logging.getLogger(__name__)


class NamedAssertionRegistry:
    """
    Independently cancelable keep-awake assertions, keyed by caller-chosen names.

    A name is registered for exactly as long as its process has not been
    canceled or observed to exit.
    """

    def __init__(self, launcher: Optional[ProcessLauncher] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 source: Optional[str] = None) -> None:
        self.launcher = launcher or ProcessLauncher()
        self.clock = clock
        self.source = source or config.DEFAULT_SOURCE
        self._lock = threading.Lock()
        self._assertions: Dict[str, Assertion] = {}

    def start(self, name: str) -> bool:
        """
        Starts a cancelable assertion under `name`.

        :return: False if the name is already active or the spawn failed.
        """
        with self._lock:
            if name in self._assertions:
                log.debug(f"{self.source}: Cancelable ({name}) already running")
                return False

            timeout = config.CANCELABLE_TIMEOUT_SECONDS
            try:
                command = build_assertion_command(timeout)
                log.info(f"{self.source}: Starting cancelable ({name}) {' '.join(command)}")
                handle = self.launcher.spawn(command, label=f"{self.source}.{name}")
            except SpawnError as e:
                log.error(f"{self.source}: Failed to start cancelable ({name}): {e}")
                return False

            assertion = Assertion(handle, self.clock() + timedelta(seconds=timeout), name=name)
            self._assertions[name] = assertion
            start_exit_watcher(self.launcher, assertion, self._on_exit)
        return True

    def cancel(self, name: str) -> bool:
        """
        Destroys the assertion registered under `name` and waits until it is dead.

        :return: False if no assertion is active under that name, if another
                 cancel is already stopping it, or if it could not be stopped.
        """
        with self._lock:
            assertion = self._assertions.get(name)
            already_canceling = assertion is not None and assertion.canceling
            if assertion is not None:
                assertion.canceling = True
        if assertion is None:
            log.debug(f"{self.source}: Cancelable not running ({name})")
            return False
        if already_canceling:
            log.debug(f"{self.source}: Cancelable ({name}) is already being stopped")
            assertion.wait_exited()
            return False

        # The entry stays registered during teardown, so start() keeps refusing the name.
        log.info(f"{self.source}: Stopping cancelable ({name})")
        try:
            terminate_assertion(self.launcher, assertion, config.GRACEFUL_SHUTDOWN_TIMEOUT)
        except (psutil.Error, OSError) as e:
            log.warning(f"{self.source}: Could not stop cancelable ({name}): {e}")
            with self._lock:
                assertion.canceling = False
            return False

        with self._lock:
            if self._assertions.get(name) is assertion:
                del self._assertions[name]
        return True

    def wait_for(self, name: str, timeout: Optional[float] = None) -> bool:
        """
        Blocks until the assertion under `name` exits or is canceled.

        An unknown name has nothing to wait for and returns immediately.

        :param timeout: Maximum seconds to block, or None to wait indefinitely.
        :return: True if the process is gone, False if the timeout elapsed first.
        """
        with self._lock:
            assertion = self._assertions.get(name)
        if assertion is None:
            return True
        return assertion.wait_exited(timeout)

    def _on_exit(self, assertion: Assertion, status: Optional[int]) -> None:
        """Watcher callback. Removes the name only if it still maps to this assertion."""
        with self._lock:
            if self._assertions.get(assertion.name) is assertion:
                del self._assertions[assertion.name]

        status_text = "unknown" if status is None else status
        log.info(f"{self.source}: Keep-awake exited ({status_text}) with name {assertion.name}")

    def is_active(self, name: str) -> bool:
        with self._lock:
            return name in self._assertions

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._assertions)

    def snapshot(self) -> Dict[str, Assertion]:
        """Returns a copy of the name to assertion mapping."""
        with self._lock:
            return dict(self._assertions)

    def cancel_all(self) -> int:
        """
        Cancels every registered assertion.

        :return: The number of assertions canceled.
        """
        canceled = 0
        for name in self.names():
            if self.cancel(name):
                canceled += 1
        return canceled
