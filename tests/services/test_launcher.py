import subprocess
import time

import pytest

from runnerprovisioner.errors import LaunchError
from runnerprovisioner.services.launcher import AgentLauncher


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None


class FakeSubprocessModule:
    DEVNULL = subprocess.DEVNULL
    STDOUT = subprocess.STDOUT

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def Popen(self, cmd, **kwargs):
        if self.error:
            raise self.error
        self.calls.append((cmd, kwargs))
        return type("FakeProcess", (), {"pid": 4242})()


def test_launch_detaches_into_new_session_and_logs(tmp_path):
    fake_subprocess = FakeSubprocessModule()
    launcher = AgentLauncher(logger=DummyLogger(), subprocess_module=fake_subprocess)

    agent = launcher.launch(str(tmp_path))

    cmd, kwargs = fake_subprocess.calls[0]
    assert cmd == [str(tmp_path / "run.sh")]
    assert kwargs["cwd"] == str(tmp_path)
    assert kwargs["start_new_session"] is True
    assert kwargs["stdin"] == subprocess.DEVNULL
    assert kwargs["stderr"] == subprocess.STDOUT
    assert str(kwargs["stdout"].name) == str(tmp_path / "runner.log")
    assert agent.pid == 4242
    assert agent.log_path == tmp_path / "runner.log"


def test_launch_reports_spawn_failure(tmp_path):
    launcher = AgentLauncher(
        logger=DummyLogger(),
        subprocess_module=FakeSubprocessModule(error=PermissionError("denied")),
    )

    with pytest.raises(LaunchError, match="denied"):
        launcher.launch(str(tmp_path))


def test_launch_runs_script_that_writes_to_log(tmp_path):
    script = tmp_path / "run.sh"
    script.write_text("#!/bin/sh\necho listening for jobs\n", encoding="utf-8")
    script.chmod(0o755)

    agent = AgentLauncher(logger=DummyLogger()).launch(str(tmp_path))

    deadline = time.monotonic() + 5
    while time.monotonic() < deadline:
        if "listening for jobs" in agent.log_path.read_text(encoding="utf-8"):
            break
        time.sleep(0.05)

    assert agent.pid > 0
    assert "listening for jobs" in agent.log_path.read_text(encoding="utf-8")
