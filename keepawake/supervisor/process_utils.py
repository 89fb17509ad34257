import sys
import psutil
import logging
import threading
import subprocess
from typing import Any, Dict, List, Optional

from keepawake.local.config import effective_settings as config

log = logging.getLogger(__name__)


class SpawnError(RuntimeError):
    """Raised when the OS refuses to create a keep-awake process."""


#* --- Command Construction ---
def build_assertion_command(seconds: int, platform: Optional[str] = None) -> List[str]:
    """
    Returns the command line holding a keep-awake assertion for `seconds`.

    :param seconds: The timeout after which the assertion is dropped by the OS.
    :param platform: Overrides sys.platform, mostly for testing.
    :raises SpawnError: If the platform has no supported keep-awake utility.
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return [
            config.KEEP_AWAKE_EXECUTABLE,
            *config.KEEP_AWAKE_FLAGS,
            config.KEEP_AWAKE_TIMEOUT_FLAG, str(seconds),
        ]
    if platform.startswith("linux"):
        return [
            config.LINUX_INHIBIT_EXECUTABLE,
            f"--what={config.LINUX_INHIBIT_WHAT}",
            f"--who={config.APP_NAME}",
            f"--why={config.LINUX_INHIBIT_WHY}",
            "--mode=block",
            "sleep", str(seconds),
        ]
    raise SpawnError(f"Keep-awake assertions are not supported on '{platform}'.")


def _get_popen_kwargs() -> Dict[str, Any]:
    """Returns the subprocess.Popen arguments shared by every assertion process."""
    kwargs: Dict[str, Any] = {
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.PIPE,
        "stdin": subprocess.DEVNULL,
    }
    if sys.platform != "win32":
        kwargs["start_new_session"] = True
    return kwargs


#* --- Process Output ---
def _read_pipe(pipe, process_name: str, level: int):
    """Target function for reader threads. Reads and logs lines from a subprocess pipe."""
    proc_logger = logging.getLogger(f"proc.{process_name}")
    try:
        for line_bytes in iter(pipe.readline, b""):
            line = line_bytes.decode("utf-8", errors="replace").strip()
            if line:
                proc_logger.log(level, line)
    except Exception as e:
        proc_logger.debug(f"Pipe reader for {process_name} stream exited: {e}")
    finally:
        pipe.close()

def log_process_output(process: psutil.Popen, name: str):
    """Starts a background thread to consume and log a process's stderr."""
    if process.stderr:
        threading.Thread(target=_read_pipe, args=(process.stderr, name, logging.WARNING), daemon=True).start()


#* --- Process Capability ---
class ProcessLauncher:
    """
    The OS-facing capability used by the supervisors: spawn a command,
    destroy it and block until it exits.

    Handles are psutil.Popen objects, which combine the subprocess API
    with psutil's process inspection.
    """

    def spawn(self, args: List[str], label: str = "keepawake") -> psutil.Popen:
        """
        Starts a process and its output reader threads.

        :param args: The full command line.
        :param label: Suffix of the 'proc.' logger receiving the process output.
        :raises SpawnError: If the OS refused to create the process.
        """
        try:
            process = psutil.Popen(args, **_get_popen_kwargs())
        except (OSError, ValueError, psutil.Error) as e:
            raise SpawnError(f"Failed to start '{' '.join(args)}': {e}") from e

        log_process_output(process, label)
        log.debug(f"Spawned {args[0]} (PID: {process.pid})")
        return process

    def terminate(self, handle: psutil.Popen) -> None:
        """Sends SIGTERM to the process. A process that is already gone is ignored."""
        try:
            handle.terminate()
        except psutil.NoSuchProcess:
            log.debug(f"Process {handle.pid} no longer exists, skipping termination.")

    def kill(self, handle: psutil.Popen) -> None:
        """Forcefully kills the process. A process that is already gone is ignored."""
        try:
            log.warning(f"Killing stubborn process (PID {handle.pid}).")
            handle.kill()
        except psutil.NoSuchProcess:
            log.debug(f"Process {handle.pid} no longer exists, skipping forceful kill.")

    def wait(self, handle: psutil.Popen) -> Optional[int]:
        """
        Blocks until the process exits.

        :return: The exit status, or None when it could not be determined.
        """
        try:
            return handle.wait()
        except (psutil.Error, ChildProcessError, OSError) as e:
            log.debug(f"Wait on process {handle.pid} ended without a status: {e}")
            return None
