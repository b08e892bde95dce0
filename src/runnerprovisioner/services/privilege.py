"""Effective-identity routing for runner-provisioner."""

import os
from pathlib import Path
from typing import Callable

from runnerprovisioner.errors import AccountSetupError
from runnerprovisioner.errors_catalog import actionable_error
from runnerprovisioner.models import ExecutionContext, ExecutionState, RunConfig


class PrivilegeRouter:
    """Picks where and as whom the provisioning pipeline runs.

    A root caller is never allowed to keep root: the configured account is
    created if needed and the pipeline is handed to it inside
    ``~account/github-runner``. Any other caller provisions in place.
    """

    def __init__(self, account_service, logger, console, geteuid: Callable[[], int] = os.geteuid):
        self.account_service = account_service
        self.logger = logger
        self.console = console
        self.geteuid = geteuid

    def detect(self) -> ExecutionState:
        if self.geteuid() == 0:
            return ExecutionState.PRIVILEGED
        return ExecutionState.UNPRIVILEGED

    def route(self, config: RunConfig) -> ExecutionContext:
        state = self.detect()
        self.logger.debug("Effective identity state: %s", state.value)

        if state is ExecutionState.UNPRIVILEGED:
            return ExecutionContext(state=state, workdir=Path(os.getcwd()))

        self.console.print(
            f"[yellow]Running as root. Setting up runner for user {config.username}...[/yellow]"
        )
        account = self.account_service.ensure_account(config.username)
        if account.pw_uid == 0:
            raise AccountSetupError(
                actionable_error("privileged_account", username=config.username)
            )
        runner_home = self.account_service.prepare_runner_home(account)
        return ExecutionContext(state=state, workdir=Path(runner_home), account=config.username)
