"""Filesystem helpers for runner-provisioner."""

import logging
import os
from typing import Type

from runnerprovisioner.errors import ProvisionerError


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger, os_module=os):
        self.logger = logger
        self.os = os_module

    def ensure_dir(self, path: str, mode: int, error_cls: Type[ProvisionerError] = ProvisionerError):
        try:
            self.os.makedirs(path, mode=mode, exist_ok=True)
        except OSError as exc:
            raise error_cls(f"Could not create directory {path}: {exc}") from exc
        self.logger.debug("Directory ready: %s", path)

    def set_owner(self, path: str, uid: int, gid: int, error_cls: Type[ProvisionerError] = ProvisionerError):
        try:
            self.os.chown(path, uid, gid)
        except OSError as exc:
            raise error_cls(f"Could not change owner of {path} to {uid}:{gid}: {exc}") from exc
        self.logger.debug("Changed owner of %s to %s:%s", path, uid, gid)
