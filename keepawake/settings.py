"""
This module contains the configuration settings for the keepawake application.
It defines paths, assertion timeouts, the keep-awake command and logging options.
It is used throughout the application to ensure consistent settings and paths.
"""

import os
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv(override=True)

#* --- Core Paths ---
BASE_DIR = pathlib.Path(__file__).resolve().parent.parent  # Project Root
LOGS_DIR = BASE_DIR / "logs"
OVERRIDES_JSON_PATH = pathlib.Path(os.getenv("KEEPAWAKE_OVERRIDES", str(BASE_DIR / "overrides.json")))

#* --- App Settings ---
APP_NAME = "keepawake"
DEFAULT_SOURCE = "Unknown"

#* --- Keep-Awake Command ---
# macOS: caffeinate -s prevents system sleep while on AC power, -t sets the timeout.
KEEP_AWAKE_EXECUTABLE = os.getenv("KEEP_AWAKE_EXECUTABLE", "caffeinate")
KEEP_AWAKE_FLAGS = os.getenv("KEEP_AWAKE_FLAGS", "-s").split()
KEEP_AWAKE_TIMEOUT_FLAG = "-t"

# Linux: systemd-inhibit holds the lock for as long as the wrapped 'sleep' runs.
LINUX_INHIBIT_EXECUTABLE = os.getenv("LINUX_INHIBIT_EXECUTABLE", "systemd-inhibit")
LINUX_INHIBIT_WHAT = "sleep:idle"
LINUX_INHIBIT_WHY = "Keep-awake assertion"

#* --- Assertion Timeouts ---
TINY_TIMEOUT_MINUTES = int(os.getenv("TINY_TIMEOUT_MINUTES", "2"))
SMALL_TIMEOUT_MINUTES = int(os.getenv("SMALL_TIMEOUT_MINUTES", "5"))
DEFAULT_TIMEOUT_MINUTES = int(os.getenv("DEFAULT_TIMEOUT_MINUTES", "10"))
MEDIUM_TIMEOUT_MINUTES = int(os.getenv("MEDIUM_TIMEOUT_MINUTES", "30"))
CANCELABLE_TIMEOUT_SECONDS = int(os.getenv("CANCELABLE_TIMEOUT_SECONDS", "3600"))  # 1 hour
GRACEFUL_SHUTDOWN_TIMEOUT = float(os.getenv("GRACEFUL_SHUTDOWN_TIMEOUT", "5"))  # seconds before force-killing

#* --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE_PATH = pathlib.Path(os.environ["LOG_FILE_PATH"]) if os.getenv("LOG_FILE_PATH") else None

#* --- Application variables ---
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "False").lower() in ('true', '1', 't')

#* --- MODIFIABLE SETTINGS (Changeable at runtime via overrides.json) ---
MODIFIABLE_SETTINGS = {
    "DEFAULT_TIMEOUT_MINUTES",
    "CANCELABLE_TIMEOUT_SECONDS",
    "GRACEFUL_SHUTDOWN_TIMEOUT",
    "LOG_LEVEL",
    "VERBOSE_LOGGING",
}
