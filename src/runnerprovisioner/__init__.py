"""
runner-provisioner - Self-hosted GitHub Actions runner setup tool
"""

__version__ = "0.1.0"

from .core import ProvisionerError, RunnerProvisioner

__all__ = ["RunnerProvisioner", "ProvisionerError"]
