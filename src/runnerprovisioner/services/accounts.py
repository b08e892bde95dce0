"""Run-as account management for runner-provisioner."""

import os
import pwd
from typing import Optional

from runnerprovisioner.constants import DEFAULT_SHELL, DIR_MODE, RUNNER_HOME_DIR_NAME
from runnerprovisioner.errors import AccountSetupError
from runnerprovisioner.errors_catalog import actionable_error


class AccountService:
    """Creates the unprivileged account the runner is handed over to."""

    def __init__(self, command_runner, filesystem_service, logger, console, pwd_module=pwd):
        self.command_runner = command_runner
        self.filesystem_service = filesystem_service
        self.logger = logger
        self.console = console
        self.pwd = pwd_module

    def lookup(self, username: str) -> Optional[pwd.struct_passwd]:
        try:
            return self.pwd.getpwnam(username)
        except KeyError:
            return None

    def ensure_account(self, username: str) -> pwd.struct_passwd:
        """Return the passwd entry for ``username``, creating the account if absent."""
        account = self.lookup(username)
        if account is not None:
            self.logger.info("User %s already exists", username)
            return account

        self.console.print(f"[blue]Creating user {username}...[/blue]")
        self.logger.info("Creating user %s with home directory and %s", username, DEFAULT_SHELL)
        result = self.command_runner.run(
            ["useradd", "-m", "-s", DEFAULT_SHELL, username],
            check=False,
            capture_output=True,
            error_cls=AccountSetupError,
        )
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            message = actionable_error("account_setup_failed", username=username)
            if stderr:
                message = f"{message}\n{stderr}"
            raise AccountSetupError(message, exit_code=result.returncode)

        account = self.lookup(username)
        if account is None:
            raise AccountSetupError(f"User {username} is still missing after useradd.")
        return account

    def prepare_runner_home(self, account: pwd.struct_passwd) -> str:
        """Create the account-owned directory the runner is installed into."""
        runner_home = os.path.join(account.pw_dir, RUNNER_HOME_DIR_NAME)
        self.filesystem_service.ensure_dir(runner_home, DIR_MODE, error_cls=AccountSetupError)
        self.filesystem_service.set_owner(
            runner_home,
            account.pw_uid,
            account.pw_gid,
            error_cls=AccountSetupError,
        )
        return runner_home
