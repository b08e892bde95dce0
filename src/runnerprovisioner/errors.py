"""Domain errors for runner-provisioner."""


class ProvisionerError(RuntimeError):
    """Raised when provisioning cannot continue safely."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code or 1


class MissingArgument(ProvisionerError):
    """Fewer positional arguments than the required repository URL and token."""


class DownloadError(ProvisionerError):
    """The runner package could not be fetched."""


class IntegrityError(ProvisionerError):
    """The downloaded package digest does not match the expected one."""


class ExtractionError(ProvisionerError):
    """The runner package is corrupt or unsafe to unpack."""


class ConfigurationError(ProvisionerError):
    """The vendor configuration tool rejected the registration."""


class AccountSetupError(ProvisionerError):
    """The run-as account or its runner directory could not be prepared."""


class LaunchError(ProvisionerError):
    """The runner agent process could not be spawned."""
