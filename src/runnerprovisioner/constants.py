"""Shared constants for runner-provisioner."""

RUNNER_VERSION = "2.329.0"
RUNNER_SHA256 = "194f1e1e4bd02f80b7e9633fc546084d8d4e19f3928a324d512ea53430102e1d"
RUNNER_PLATFORM = "linux-x64"
RUNNER_DOWNLOAD_BASE_URL = "https://github.com/actions/runner/releases/download"

DEFAULT_LABELS = "azure-linux"
DEFAULT_WORK_DIR = "_work"
DEFAULT_USERNAME = "runner"
DEFAULT_SHELL = "/bin/bash"
RUNNER_GROUP = "Default"

INSTALL_DIR_NAME = "actions-runner"
RUNNER_HOME_DIR_NAME = "github-runner"
CONFIG_SCRIPT = "config.sh"
RUN_SCRIPT = "run.sh"
LOG_FILE_NAME = "runner.log"

DEFAULT_CONFIG_FILE = ".runnerprovisioner.yml"

DIR_MODE = 0o755
