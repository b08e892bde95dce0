"""Runner registration through the vendor configuration script."""

import os
from typing import List

from runnerprovisioner.constants import CONFIG_SCRIPT, RUNNER_GROUP
from runnerprovisioner.errors import ConfigurationError
from runnerprovisioner.errors_catalog import actionable_error
from runnerprovisioner.models import RunConfig


class RegistrationService:
    """Binds an unpacked runner to its repository via ``config.sh``."""

    def __init__(self, command_runner, logger, console):
        self.command_runner = command_runner
        self.logger = logger
        self.console = console

    def build_command(self, install_dir: str, config: RunConfig) -> List[str]:
        return [
            os.path.join(install_dir, CONFIG_SCRIPT),
            "--url",
            config.repo_url,
            "--token",
            config.token,
            "--name",
            config.runner_name,
            "--labels",
            config.labels,
            "--work",
            config.work_dir,
            "--runnergroup",
            RUNNER_GROUP,
            "--unattended",
        ]

    def configure(self, install_dir: str, config: RunConfig):
        self.console.print("[blue]Configuring the runner...[/blue]")
        self.logger.info("Registering runner %s against %s", config.runner_name, config.repo_url)

        result = self.command_runner.run(
            self.build_command(install_dir, config),
            check=False,
            cwd=install_dir,
            error_cls=ConfigurationError,
            redact=[config.token],
        )
        if result.returncode != 0:
            raise ConfigurationError(
                actionable_error("registration_failed", returncode=str(result.returncode)),
                exit_code=result.returncode,
            )
        self.console.print("[green]Runner registered.[/green]")
