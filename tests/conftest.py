"""
Shared fixtures: an in-memory process launcher and a controllable clock.
"""

import itertools
import threading
import time
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import pytest

from keepawake.local.config import effective_settings as config
from keepawake.supervisor import process_utils, registry, slot
from keepawake.supervisor.process_utils import SpawnError


class FakeProcess:
    """A stand-in for psutil.Popen whose exit is triggered by the test."""

    _pids = itertools.count(4000)

    def __init__(self, args: List[str]) -> None:
        self.args = args
        self.pid = next(self._pids)
        self.returncode: Optional[int] = None
        self.terminated = False
        self.killed = False
        self._exit = threading.Event()

    def finish(self, status: int = 0) -> None:
        if not self._exit.is_set():
            self.returncode = status
            self._exit.set()

    @property
    def is_dead(self) -> bool:
        return self._exit.is_set()


class FakeLauncher:
    """Records spawns and lets tests decide when each process exits."""

    def __init__(self, fail: bool = False, stubborn: bool = False) -> None:
        self.fail = fail
        self.stubborn = stubborn
        self.spawned: List[FakeProcess] = []

    @property
    def spawn_count(self) -> int:
        return len(self.spawned)

    def spawn(self, args, label="keepawake"):
        if self.fail:
            raise SpawnError(f"Failed to start '{' '.join(args)}': refused")
        process = FakeProcess(args)
        self.spawned.append(process)
        return process

    def terminate(self, handle: FakeProcess) -> None:
        handle.terminated = True
        if not self.stubborn:
            handle.finish(-15)

    def kill(self, handle: FakeProcess) -> None:
        handle.killed = True
        handle.finish(-9)

    def wait(self, handle: FakeProcess) -> Optional[int]:
        handle._exit.wait()
        return handle.returncode


class FakeClock:
    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Polls until predicate() is true. Watcher callbacks run on other threads."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture(autouse=True)
def darwin_commands(monkeypatch):
    """Builds macOS command lines regardless of the host platform."""
    def build(seconds):
        return process_utils.build_assertion_command(seconds, platform="darwin")
    monkeypatch.setattr(slot, "build_assertion_command", build)
    monkeypatch.setattr(registry, "build_assertion_command", build)


@pytest.fixture(autouse=True)
def short_grace_period(monkeypatch):
    monkeypatch.setattr(config, "GRACEFUL_SHUTDOWN_TIMEOUT", 0.2)


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def clock():
    return FakeClock()
