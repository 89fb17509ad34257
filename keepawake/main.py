import sys
import logging
import threading

# Basic console logger for messages BEFORE full setup is complete.
# This logger will be replaced by the full setup later.
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)-8s - [console] - %(message)s',
    stream=sys.stdout
)
log = logging.getLogger("console")

import keepawake.console as console
from keepawake.local.config import effective_settings as config
from keepawake.log.setup import setup_logging
from keepawake.supervisor import KeepAwakeRunner

CONSOLE_LOCK = threading.Lock()


def run_once(runner: KeepAwakeRunner, command: str, args: list) -> None:
    """
    Runs a single command and keeps the process alive while its assertions last.
    Ctrl+C releases everything early.
    """
    console.execute_command(runner, command, args)
    try:
        runner.wait_until_idle()
    except KeyboardInterrupt:
        log.warning("Interrupted. Releasing keep-awake assertions.")
    finally:
        runner.release_all()


def main() -> None:
    """The main entry point for the console application."""
    setup_logging(logging.DEBUG if config.VERBOSE_LOGGING else None)
    runner = KeepAwakeRunner(source="console")

    # Non-interactive mode for one-off commands
    if len(sys.argv) > 1:
        command, args = sys.argv[1].lower(), sys.argv[2:]
        if "--verbose" in args:
            console.toggle_verbose_logging()
            args.remove("--verbose")
        run_once(runner, command, args)
        return

    # Interactive mode
    print("--- Keep-Awake Console ---")
    print("Type 'help' for a list of commands.")

    while True:
        try:
            # The input prompt must be outside the lock to not block background threads
            command_line_str = input("> ")
            with CONSOLE_LOCK:
                if not command_line_str.strip():
                    continue
                command_line = command_line_str.strip().split()
                command, args = command_line[0].lower(), command_line[1:]

                log.debug(f"Received command: {command}, args: {args}")

                if console.execute_command(runner, command, args):
                    break

        except (KeyboardInterrupt, EOFError):
            with CONSOLE_LOCK:
                log.warning("\nExiting console. Releasing keep-awake assertions.")
                runner.release_all()
                break
        except Exception as e:
            with CONSOLE_LOCK:
                log.error(f"An unexpected error occurred in the console: {e}", exc_info=True)

if __name__ == "__main__":
    main()
    print("Exiting keep-awake console.")
