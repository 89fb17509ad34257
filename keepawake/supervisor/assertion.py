import threading
from enum import Enum
from datetime import datetime, timedelta
from typing import Optional

import psutil


class DurationUnit(Enum):
    """Units accepted by the renewable slot. The value is the length in seconds."""
    SECONDS = 1
    MINUTES = 60
    HOURS = 3600

    def to_seconds(self, amount: int) -> int:
        return amount * self.value

    def to_timedelta(self, amount: int) -> timedelta:
        return timedelta(seconds=self.to_seconds(amount))


class Assertion:
    """
    One spawned keep-awake process plus its expiry and identity metadata.

    The `exited` event is set exactly once, by the exit watcher, after the
    process has been observed to terminate.
    """

    def __init__(self, handle: psutil.Popen, expires_at: datetime, name: Optional[str] = None) -> None:
        self.handle = handle
        self.expires_at = expires_at
        self.name = name
        self.exit_status: Optional[int] = None
        self.exited = threading.Event()
        # Set by the owner, under its lock, while a cancel is tearing the process down.
        self.canceling = False

    @property
    def pid(self) -> Optional[int]:
        return getattr(self.handle, "pid", None)

    def mark_exited(self, status: Optional[int]) -> None:
        self.exit_status = status
        self.exited.set()

    def wait_exited(self, timeout: Optional[float] = None) -> bool:
        """Blocks until the watcher has observed the exit. Returns False on timeout."""
        return self.exited.wait(timeout)

    def describe_until(self) -> str:
        return self.expires_at.strftime("%H:%M:%S")

    def __repr__(self) -> str:
        label = f" name={self.name!r}" if self.name else ""
        return f"<Assertion pid={self.pid}{label} until={self.describe_until()}>"
