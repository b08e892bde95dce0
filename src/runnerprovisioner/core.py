import logging
import os
import sys
from typing import Callable, Dict, List, Optional

import requests
from rich.console import Console

from .constants import DIR_MODE, INSTALL_DIR_NAME
from .errors import AccountSetupError, ProvisionerError
from .models import ExecutionContext, ExecutionState, LaunchedAgent, RunConfig, RunnerRelease
from .services.accounts import AccountService
from .services.archive import ArchiveService
from .services.command_runner import CommandRunner
from .services.download import DownloadService
from .services.filesystem import FileSystemService
from .services.launcher import AgentLauncher
from .services.privilege import PrivilegeRouter
from .services.registration import RegistrationService
from .services.validation import ValidationService

console = Console()
logger = logging.getLogger("runnerprovisioner")


class RunnerProvisioner:
    def __init__(
        self,
        config: RunConfig,
        release: Optional[RunnerRelease] = None,
        verbose: bool = False,
        download_timeout: Optional[float] = None,
        log_file: Optional[str] = None,
        geteuid: Callable[[], int] = os.geteuid,
    ):
        self.config = config
        self.release = release or RunnerRelease()
        self.verbose = verbose
        self.download_timeout = download_timeout
        self.log_file = log_file

        self.filesystem_service = FileSystemService(logger=logger)
        self.archive_service = ArchiveService()
        self.validation_service = ValidationService()
        self.command_runner = CommandRunner(logger=logger)
        self.download_service = DownloadService(
            validation_service=self.validation_service,
            logger=logger,
            console=console,
            requests_module=requests,
            timeout=download_timeout,
        )
        self.account_service = AccountService(
            command_runner=self.command_runner,
            filesystem_service=self.filesystem_service,
            logger=logger,
            console=console,
        )
        self.privilege_router = PrivilegeRouter(
            account_service=self.account_service,
            logger=logger,
            console=console,
            geteuid=geteuid,
        )
        self.registration_service = RegistrationService(
            command_runner=self.command_runner,
            logger=logger,
            console=console,
        )
        self.launcher = AgentLauncher(logger=logger)

    def print_banner(self):
        console.print("[bold]=== GitHub Actions Runner Setup ===[/bold]")
        console.print(f"Repository URL: {self.config.repo_url}")
        console.print(f"Runner Name: {self.config.runner_name}")
        console.print(f"Labels: {self.config.labels}")
        console.print(f"Work Directory: {self.config.work_dir}")
        console.print(f"Runner Version: {self.release.version}")
        console.print("[bold]==================================[/bold]")

    def print_summary(self, agent: LaunchedAgent, install_dir: str):
        console.print()
        console.print("[bold green]=== Setup Complete ===[/bold green]")
        console.print(f"Runner is now running in the background with PID: {agent.pid}")
        console.print(f"Log file: {agent.log_path}")
        console.print()
        console.print("Useful commands:")
        console.print(f"  View logs:        tail -f {agent.log_path}")
        console.print("  Check if running: ps aux | grep run.sh")
        console.print(f"  Stop runner:      kill {agent.pid}")
        console.print("  Or stop runner:   pkill -f run.sh")
        console.print()
        console.print(f"Runner directory: {install_dir}")
        console.print("[bold green]======================[/bold green]")

    def provision(self, context: ExecutionContext) -> LaunchedAgent:
        """Install, verify, register and launch the runner under ``context.workdir``.

        This is the only provisioning procedure; the privileged path runs it
        in a subordinate process owned by the run-as account.
        """
        install_dir = os.path.join(str(context.workdir), INSTALL_DIR_NAME)

        console.print(f"[blue]Creating {INSTALL_DIR_NAME} directory...[/blue]")
        self.filesystem_service.ensure_dir(install_dir, DIR_MODE)

        package_path = os.path.join(install_dir, self.release.package_filename)
        console.print(f"[blue]Downloading GitHub Actions Runner v{self.release.version}...[/blue]")
        self.download_service.download_file(
            self.release.download_url,
            package_path,
            description=f"Downloading {self.release.package_filename}",
            expected_sha256=self.release.sha256,
        )
        console.print("[green]Package integrity verified.[/green]")

        console.print("[blue]Extracting runner package...[/blue]")
        logger.info("Extracting %s into %s", package_path, install_dir)
        self.archive_service.safe_extract_tar(package_path, install_dir)

        self.registration_service.configure(install_dir, self.config)

        console.print("[blue]Starting the runner in background...[/blue]")
        agent = self.launcher.launch(install_dir)
        self.print_summary(agent, install_dir)
        return agent

    def _subordinate_command(self) -> List[str]:
        cmd = [
            sys.executable,
            "-m",
            "runnerprovisioner.cli",
            "--runner-version",
            self.release.version,
            "--runner-sha256",
            self.release.sha256,
            "--download-base-url",
            self.release.base_url,
        ]
        if self.download_timeout is not None:
            cmd += ["--download-timeout", str(self.download_timeout)]
        if self.log_file:
            cmd += ["--log-file", self.log_file]
        if self.verbose:
            cmd.append("--verbose")
        return cmd + ["--"] + self.config.as_arguments()

    def _subordinate_env(self, account) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(
            HOME=account.pw_dir,
            USER=account.pw_name,
            LOGNAME=account.pw_name,
        )
        return env

    def run_as_account(self, context: ExecutionContext) -> int:
        account = self.account_service.lookup(context.account)
        if account is None:
            raise AccountSetupError(f"User {context.account} does not exist.")

        if self.log_file and os.path.exists(self.log_file):
            # The subordinate appends to the same log file as the account.
            self.filesystem_service.set_owner(
                self.log_file,
                account.pw_uid,
                account.pw_gid,
                error_cls=AccountSetupError,
            )

        console.print(f"[blue]Switching to user {account.pw_name} in {context.workdir}...[/blue]")
        result = self.command_runner.run(
            self._subordinate_command(),
            check=False,
            cwd=str(context.workdir),
            env=self._subordinate_env(account),
            user=account.pw_uid,
            group=account.pw_gid,
            redact=[self.config.token],
        )
        returncode = result.returncode
        if returncode < 0:
            # Killed by a signal: report it the way a shell does.
            logger.error("Setup as %s was killed by signal %s", account.pw_name, -returncode)
            return 128 - returncode

        if returncode == 0:
            console.print(f"[green]Runner setup completed for user {account.pw_name}.[/green]")
        else:
            logger.error("Setup as %s exited with status %s", account.pw_name, returncode)
        return returncode

    def run(self) -> int:
        try:
            logger.debug("Starting runner provisioning...")
            self.print_banner()

            context = self.privilege_router.route(self.config)
            if context.state is ExecutionState.PRIVILEGED:
                return self.run_as_account(context)

            self.provision(context)
            return 0

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return 1
        except ProvisionerError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            return exc.exit_code
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            return 1
