import psutil
import logging
from typing import List, Optional

from keepawake.local.config import effective_settings as config
from keepawake.supervisor import Assertion, KeepAwakeRunner

log = logging.getLogger(__name__)


def _config_show():
    """Displays the current values of every modifiable setting."""
    print("\n--- Current Application Configuration ---")
    print(f"(Overrides file: {config.OVERRIDES_JSON_PATH})")
    for key, value in config.modifiable().items():
        print(f"  {key} = {value}")
    print("---")
    print("Use 'config set <KEY> <VALUE>' to change a setting.")
    print("---------------------------------------\n")

def _config_set(args: List[str]):
    """Sets a configuration setting and persists it to the overrides file."""
    if len(args) < 2:
        print("Usage: config set <SETTING_NAME> <VALUE>")
        return

    key, value_str = args[0].upper(), " ".join(args[1:])
    _, message = config.update_setting(key, value_str)
    print(message)

def _config_help():
    """Displays help for the config command."""
    print("\nConfig Command Help:")
    print("  config show                - Display all modifiable settings.")
    print("  config set KEY VALUE       - Change a setting and save it to the overrides file.")
    print("  config help                - Show this help message.")

def handle_config_command(args: List[str]) -> None:
    """
    Handles all sub-commands for the 'config' command-line interface.

    :param args: A list of string arguments following the 'config' command.
    """
    sub_command = args[0].lower() if args else "show"

    if sub_command == "show":
        _config_show()
    elif sub_command == "set":
        _config_set(args[1:])
    elif sub_command == "help":
        _config_help()
    else:
        print(f"Unknown config sub-command: '{sub_command}'. Type 'config help' for available commands.")

def _describe_process(label: str, assertion: Assertion) -> str:
    """Formats one status line with the live process state."""
    pid = assertion.pid
    try:
        p = psutil.Process(pid)
        state = p.status().upper()
    except psutil.NoSuchProcess:
        state = "STOPPED"
    except psutil.AccessDenied:
        state = "RUNNING (Access Denied)"
    except (TypeError, ValueError):
        state = "UNKNOWN"
    return f"  - {label:<25} : PID {str(pid):<8} | Status: {state} | Until: {assertion.describe_until()}"

def display_status(runner: KeepAwakeRunner) -> None:
    """Displays the renewable and cancelable assertions owned by the runner."""
    status = runner.status()
    renewable: Optional[Assertion] = status["renewable"]
    cancelable = status["cancelable"]

    print(f"\n--- Keep-Awake Status ({status['source']}) ---")
    if renewable is None and not cancelable:
        print("  No active keep-awake assertions.")
    if renewable is not None:
        print(_describe_process("renewable", renewable))
    for name, assertion in sorted(cancelable.items()):
        print(_describe_process(f"cancelable ({name})", assertion))
    print("-" * 26 + "\n")

def toggle_verbose_logging() -> None:
    """Toggles verbose (DEBUG level) logging for the console handler."""
    config.VERBOSE_LOGGING = not config.VERBOSE_LOGGING
    new_level = logging.DEBUG if config.VERBOSE_LOGGING else logging.INFO

    # Reconfigure the console handler's level directly
    root_logger = logging.getLogger()
    found_handler = False
    for handler in root_logger.handlers:
        if type(handler) is logging.StreamHandler:
            handler.setLevel(new_level)
            found_handler = True
            break

    status = "ON" if config.VERBOSE_LOGGING else "OFF"
    if found_handler:
        print(f"Verbose console logging is now {status}.")
    else:
        print("Could not find console handler to modify level.")

def print_help():
    """Prints the main help text for the console."""
    print("\nAvailable commands:")
    print("  awake [minutes]        - Keep the system awake (renewable, default from settings).")
    print("  awake-seconds <s>      - Keep the system awake for a number of seconds.")
    print("  tiny | small | medium  - Keep the system awake for a preset duration.")
    print("  hold <name>            - Start a cancelable keep-awake under a name.")
    print("  release <name>         - Cancel a named keep-awake.")
    print("  wait <name>            - Block until a named keep-awake ends.")
    print("  status                 - Show all active keep-awake assertions.")
    print("  config <cmd>           - Manage configuration. Use 'config help' for more details.")
    print("  verbose                - Toggle detailed DEBUG log output in the console.")
    print("  exit                   - Release every assertion and exit the console.")
    print()
