import logging
from typing import Callable, Dict, List

from keepawake.supervisor import KeepAwakeRunner
from keepawake.console.handler import display_status, handle_config_command, toggle_verbose_logging, print_help

log = logging.getLogger(__name__)


def _require_name(args: List[str], usage: str) -> str:
    if not args:
        raise ValueError(f"Usage: {usage}")
    return args[0]

def _parse_amount(args: List[str], usage: str) -> int:
    try:
        return int(args[0])
    except (IndexError, ValueError):
        raise ValueError(f"Usage: {usage}")

def _report(ok: bool, success: str, failure: str) -> bool:
    print(success if ok else failure)
    return ok

def execute_command(runner: KeepAwakeRunner, command: str, args: List[str]) -> bool:
    """
    Executes a single command from the user.

    :param runner: The runner owning every assertion started from the console.
    :param command: The main command string (e.g., 'awake', 'hold').
    :param args: A list of arguments for the command.
    :return bool: True if the console should exit, False otherwise.
    """
    log.debug(f"Executing command: {command}, args: {args}")
    command_map: Dict[str, Callable[[], object]] = {
        "awake": lambda: _report(
            runner.keep_awake(_parse_amount(args, "awake [minutes]") if args else None),
            "Keep-awake requested.", "Failed to start keep-awake. Check logs for details."),
        "awake-seconds": lambda: _report(
            runner.keep_awake_seconds(_parse_amount(args, "awake-seconds <seconds>")),
            "Keep-awake requested.", "Failed to start keep-awake. Check logs for details."),
        "tiny": lambda: _report(runner.tiny(), "Tiny keep-awake requested.", "Failed to start keep-awake."),
        "small": lambda: _report(runner.small(), "Small keep-awake requested.", "Failed to start keep-awake."),
        "medium": lambda: _report(runner.medium(), "Medium keep-awake requested.", "Failed to start keep-awake."),
        "hold": lambda: _report(
            runner.hold(_require_name(args, "hold <name>")),
            f"Holding keep-awake '{args[0]}'.", f"Keep-awake '{args[0]}' is already running or failed to start."),
        "release": lambda: _report(
            runner.cancel(_require_name(args, "release <name>")),
            f"Released keep-awake '{args[0]}'.", f"No keep-awake named '{args[0]}' is running."),
        "wait": lambda: runner.wait_for(_require_name(args, "wait <name>")),
        "status": lambda: display_status(runner),
        "config": lambda: handle_config_command(args),
        "verbose": toggle_verbose_logging,
        "help": print_help,
    }

    if command == "exit":
        runner.release_all()
        return True

    if command not in command_map:
        log.info(f"Unknown command: '{command}'. Type 'help' for a list of commands.")
        return False

    try:
        command_map[command]()
    except ValueError as e:
        print(e)
    return False
