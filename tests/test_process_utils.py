import logging
import sys

import pytest

from conftest import wait_until
from keepawake.supervisor import DurationUnit, NamedAssertionRegistry, RenewableAssertionSlot
from keepawake.supervisor import registry, slot
from keepawake.supervisor.process_utils import ProcessLauncher, SpawnError, build_assertion_command

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX process semantics")


class TestBuildAssertionCommand:

    def test_macos_uses_caffeinate(self):
        assert build_assertion_command(600, platform="darwin") == ["caffeinate", "-s", "-t", "600"]

    def test_linux_wraps_sleep_in_systemd_inhibit(self):
        command = build_assertion_command(120, platform="linux")

        assert command[0] == "systemd-inhibit"
        assert "--mode=block" in command
        assert command[-2:] == ["sleep", "120"]

    def test_unsupported_platform(self):
        with pytest.raises(SpawnError):
            build_assertion_command(60, platform="win32")


@posix_only
class TestProcessLauncher:

    def test_missing_executable_raises_spawn_error(self, tmp_path):
        with pytest.raises(SpawnError):
            ProcessLauncher().spawn([str(tmp_path / "no-such-binary")])

    def test_wait_returns_exit_status(self):
        launcher = ProcessLauncher()
        handle = launcher.spawn([sys.executable, "-c", "import sys; sys.exit(3)"])

        assert launcher.wait(handle) == 3

    def test_terminate_stops_process(self):
        launcher = ProcessLauncher()
        handle = launcher.spawn([sys.executable, "-c", "import time; time.sleep(30)"])

        launcher.terminate(handle)
        launcher.wait(handle)

        assert not handle.is_running()

    def test_stderr_is_logged_under_process_label(self, caplog):
        caplog.set_level(logging.WARNING, logger="proc.job")
        launcher = ProcessLauncher()
        handle = launcher.spawn([sys.executable, "-c", "import sys; sys.stderr.write('inhibit failed\\n')"], label="job")
        launcher.wait(handle)

        assert wait_until(lambda: any(r.name == "proc.job" for r in caplog.records))
        record = next(r for r in caplog.records if r.name == "proc.job")
        assert record.levelno == logging.WARNING
        assert record.getMessage() == "inhibit failed"

    def test_stdout_is_discarded(self):
        launcher = ProcessLauncher()
        handle = launcher.spawn([sys.executable, "-c", "print('chatter')"])

        assert handle.stdout is None
        assert launcher.wait(handle) == 0


def _sleep_command(seconds):
    return [sys.executable, "-c", f"import time; time.sleep({seconds})"]


@posix_only
class TestRealProcesses:
    """Drives the supervisors with real short-lived processes."""

    @pytest.fixture(autouse=True)
    def sleep_commands(self, monkeypatch):
        monkeypatch.setattr(slot, "build_assertion_command", _sleep_command)
        monkeypatch.setattr(registry, "build_assertion_command", _sleep_command)

    def test_slot_goes_idle_after_timeout(self):
        renewable = RenewableAssertionSlot(ProcessLauncher())

        assert renewable.request(DurationUnit.SECONDS, 1)
        assert renewable.is_active()
        assert wait_until(lambda: not renewable.is_active(), timeout=10)

    def test_slot_replacement_kills_previous_process(self):
        renewable = RenewableAssertionSlot(ProcessLauncher())
        renewable.request(DurationUnit.SECONDS, 30)
        first = renewable.current()

        renewable.request(DurationUnit.SECONDS, 60)

        assert first.exited.is_set()
        assert not first.handle.is_running()
        assert renewable.current() is not first
        renewable.release()

    def test_registry_cancel(self):
        assertions = NamedAssertionRegistry(ProcessLauncher())
        assert assertions.start("job")
        handle = assertions.snapshot()["job"].handle

        assert assertions.cancel("job")
        assert not handle.is_running()
        assert assertions.names() == []
