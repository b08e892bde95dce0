"""Subprocess execution service for runner-provisioner."""

import subprocess
from typing import Dict, List, Optional, Type

from runnerprovisioner.errors import ProvisionerError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, default_timeout: Optional[float] = None, subprocess_module=subprocess):
        self.logger = logger
        self.default_timeout = default_timeout
        self.subprocess = subprocess_module

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        user: Optional[int] = None,
        group: Optional[int] = None,
        timeout: Optional[float] = None,
        error_cls: Type[ProvisionerError] = ProvisionerError,
        redact: Optional[List[str]] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = self._format(cmd, redact)
        self.logger.debug("Executing: %s", cmd_str)

        kwargs = {}
        if user is not None:
            # Root's supplementary groups must not leak into the child.
            kwargs.update(user=user, group=group, extra_groups=[])

        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = self.subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                cwd=cwd,
                env=env,
                timeout=effective_timeout,
                **kwargs,
            )
        except FileNotFoundError as exc:
            raise error_cls(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise error_cls(f"Command timed out after {effective_timeout}s: {cmd_str}") from exc
        except Exception as exc:
            raise error_cls(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0 or not check:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"
        raise error_cls(message, exit_code=result.returncode)

    def _format(self, cmd: List[str], redact: Optional[List[str]]) -> str:
        hidden = set(redact or [])
        return " ".join("***" if part in hidden else part for part in cmd)
