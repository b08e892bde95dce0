"""Shared domain models for runner-provisioner."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .constants import (
    DEFAULT_LABELS,
    DEFAULT_USERNAME,
    DEFAULT_WORK_DIR,
    RUNNER_DOWNLOAD_BASE_URL,
    RUNNER_PLATFORM,
    RUNNER_SHA256,
    RUNNER_VERSION,
)


@dataclass(frozen=True)
class RunDefaults:
    """Values used for optional positional arguments that were not given."""

    labels: str = DEFAULT_LABELS
    work_dir: str = DEFAULT_WORK_DIR
    username: str = DEFAULT_USERNAME


@dataclass(frozen=True)
class RunConfig:
    """Resolved inputs for a single provisioning run."""

    repo_url: str
    token: str = field(repr=False)
    runner_name: str
    labels: str
    work_dir: str
    username: str

    def as_arguments(self) -> List[str]:
        return [
            self.repo_url,
            self.token,
            self.runner_name,
            self.labels,
            self.work_dir,
            self.username,
        ]


@dataclass(frozen=True)
class RunnerRelease:
    """Pinned runner package and the digest it must match."""

    version: str = RUNNER_VERSION
    sha256: str = RUNNER_SHA256
    platform: str = RUNNER_PLATFORM
    base_url: str = RUNNER_DOWNLOAD_BASE_URL

    @property
    def package_filename(self) -> str:
        return f"actions-runner-{self.platform}-{self.version}.tar.gz"

    @property
    def download_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/v{self.version}/{self.package_filename}"


class ExecutionState(str, Enum):
    PRIVILEGED = "privileged"
    UNPRIVILEGED = "unprivileged"


@dataclass(frozen=True)
class ExecutionContext:
    """Where the pipeline runs and, when de-escalating, as whom."""

    state: ExecutionState
    workdir: Path
    account: Optional[str] = None


@dataclass(frozen=True)
class LaunchedAgent:
    pid: int
    log_path: Path
