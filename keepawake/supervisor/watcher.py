import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional

from keepawake.supervisor.assertion import Assertion

if TYPE_CHECKING:
    from .process_utils import ProcessLauncher

log = logging.getLogger(__name__)

ExitCallback = Callable[[Assertion, Optional[int]], None]


def _watch_process_exit(launcher: "ProcessLauncher", assertion: Assertion, on_exit: ExitCallback) -> None:
    """
    Blocks until the assertion's process exits, then runs the owner's cleanup.
    Runs in a dedicated background thread.

    :param launcher: The process capability used to wait on the handle.
    :param assertion: The assertion this watcher is bound to.
    :param on_exit: Cleanup callback into the owning component.
    """
    status = launcher.wait(assertion.handle)
    # Signal before the callback takes the owner's lock; teardown paths wait on this.
    assertion.mark_exited(status)
    try:
        on_exit(assertion, status)
    except Exception as e:
        log.error(f"Exit callback for {assertion!r} failed: {e}", exc_info=True)


def start_exit_watcher(launcher: "ProcessLauncher", assertion: Assertion, on_exit: ExitCallback) -> threading.Thread:
    """
    Starts a thread that observes the termination of one assertion process.

    :param launcher: The process capability used to wait on the handle.
    :param assertion: The assertion to watch.
    :param on_exit: Called once with (assertion, status) after the process exits.
    :return: The started watcher thread.
    """
    watcher_thread = threading.Thread(
        target=_watch_process_exit,
        args=(launcher, assertion, on_exit),
        daemon=True,
        name=f"ExitWatcher-{assertion.name or assertion.pid}"
    )
    watcher_thread.start()
    return watcher_thread


def terminate_assertion(launcher: "ProcessLauncher", assertion: Assertion, timeout: float) -> None:
    """
    Destroys an assertion process and blocks until its watcher has seen it exit.

    Sends SIGTERM first and escalates to a kill if the process does not
    terminate within `timeout` seconds.

    :param launcher: The process capability.
    :param assertion: The assertion to destroy. It must have a running watcher.
    :param timeout: Seconds to wait before force-killing.
    """
    if assertion.exited.is_set():
        return

    log.debug(f"Sending SIGTERM to {assertion!r}")
    launcher.terminate(assertion.handle)
    if assertion.wait_exited(timeout):
        return

    log.warning(f"{assertion!r} did not terminate gracefully. Forcing shutdown...")
    launcher.kill(assertion.handle)
    assertion.wait_exited()
