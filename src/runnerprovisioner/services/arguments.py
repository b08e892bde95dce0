"""Positional argument resolution for runner-provisioner."""

import socket
import time
from typing import Callable, Optional, Sequence

from runnerprovisioner.errors import MissingArgument
from runnerprovisioner.errors_catalog import actionable_error
from runnerprovisioner.models import RunConfig, RunDefaults

USAGE = """\
Usage: {prog} <repo_url> <token> [runner_name] [labels] [work_dir] [username]

Required arguments:
  repo_url     - GitHub repository URL (e.g., https://github.com/owner/repo)
  token        - GitHub runner registration token

Optional arguments:
  runner_name  - Name for the runner (default: hostname with timestamp)
  labels       - Comma-separated labels (default: {labels})
  work_dir     - Work directory name (default: {work_dir})
  username     - Account to run as when started by root (default: {username})

Examples:
  {prog} https://github.com/myorg/myrepo ABC123TOKEN
  {prog} https://github.com/myorg/myrepo ABC123TOKEN my-runner custom-label1,custom-label2
  {prog} https://github.com/myorg/myrepo ABC123TOKEN my-runner azure-linux,gpu custom_work
  sudo {prog} https://github.com/myorg/myrepo ABC123TOKEN my-runner azure-linux _work ciuser"""


class ArgumentResolver:
    """Turns ``repo_url token [name] [labels] [work_dir] [username]`` into a RunConfig."""

    def __init__(
        self,
        defaults: Optional[RunDefaults] = None,
        hostname: Callable[[], str] = socket.gethostname,
        clock: Callable[[], float] = time.time,
    ):
        self.defaults = defaults or RunDefaults()
        self.hostname = hostname
        self.clock = clock

    def usage(self, prog: str) -> str:
        return USAGE.format(
            prog=prog,
            labels=self.defaults.labels,
            work_dir=self.defaults.work_dir,
            username=self.defaults.username,
        )

    def default_runner_name(self) -> str:
        return f"{self.hostname()}-{int(self.clock())}"

    def resolve(self, tokens: Sequence[str]) -> RunConfig:
        if len(tokens) < 2:
            raise MissingArgument(actionable_error("missing_arguments"))

        def slot(index: int) -> Optional[str]:
            # Empty strings count as absent, matching ${N:-default}.
            if len(tokens) > index and tokens[index]:
                return tokens[index]
            return None

        return RunConfig(
            repo_url=tokens[0],
            token=tokens[1],
            runner_name=slot(2) or self.default_runner_name(),
            labels=slot(3) or self.defaults.labels,
            work_dir=slot(4) or self.defaults.work_dir,
            username=slot(5) or self.defaults.username,
        )
