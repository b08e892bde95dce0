"""Detached launch of the runner agent."""

import os
import subprocess
from pathlib import Path

from runnerprovisioner.constants import LOG_FILE_NAME, RUN_SCRIPT
from runnerprovisioner.errors import LaunchError
from runnerprovisioner.models import LaunchedAgent


class AgentLauncher:
    """Starts ``run.sh`` so it outlives the provisioning process.

    This is spawn-and-forget on purpose: the child gets its own session (no
    controlling terminal, immune to the caller's SIGHUP) and its output goes
    to ``runner.log``. The ``Popen`` handle is dropped without waiting; once
    the provisioner exits, init adopts and reaps the agent.
    """

    def __init__(self, logger, subprocess_module=subprocess):
        self.logger = logger
        self.subprocess = subprocess_module

    def launch(self, install_dir: str) -> LaunchedAgent:
        log_path = Path(install_dir) / LOG_FILE_NAME
        command = [os.path.join(install_dir, RUN_SCRIPT)]
        self.logger.debug("Launching detached: %s > %s", command[0], log_path)

        try:
            with open(log_path, "ab") as log_file:
                process = self.subprocess.Popen(
                    command,
                    cwd=install_dir,
                    stdin=self.subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=self.subprocess.STDOUT,
                    start_new_session=True,
                    close_fds=True,
                )
        except OSError as exc:
            raise LaunchError(f"Could not start {command[0]}: {exc}") from exc

        self.logger.info("Runner started with PID %s", process.pid)
        return LaunchedAgent(pid=process.pid, log_path=log_path)
