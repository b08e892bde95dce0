"""Release metadata validation helpers for runner-provisioner."""

from typing import Optional
from urllib.parse import urlparse

from packaging import version

from runnerprovisioner.errors import ProvisionerError
from runnerprovisioner.errors_catalog import actionable_error
from runnerprovisioner.models import RunnerRelease


class ValidationService:
    """Validates release overrides and the download protocol policy."""

    def enforce_https_policy(self, location: str, label: str):
        scheme = urlparse(location).scheme.lower()
        if scheme == "http":
            raise ProvisionerError(actionable_error("insecure_http", label=label))
        if scheme != "https":
            raise ProvisionerError(f"{label} is not an HTTPS URL: {location}")

    def normalize_sha256(self, value: Optional[str], label: str) -> Optional[str]:
        if value is None:
            return None

        clean_value = value.strip().lower()
        if len(clean_value) != 64 or any(c not in "0123456789abcdef" for c in clean_value):
            raise ProvisionerError(actionable_error("invalid_sha256", label=label))
        return clean_value

    def normalize_version(self, value: str) -> str:
        clean_value = value.strip().lstrip("v")
        try:
            version.Version(clean_value)
        except version.InvalidVersion as exc:
            raise ProvisionerError(f"Invalid runner version: {value}") from exc
        return clean_value

    def build_release(
        self,
        runner_version: Optional[str] = None,
        runner_sha256: Optional[str] = None,
        download_base_url: Optional[str] = None,
    ) -> RunnerRelease:
        """Merge overrides into the pinned release.

        A different version is only accepted together with its digest, so a
        package is never registered unverified.
        """
        defaults = RunnerRelease()
        sha256 = self.normalize_sha256(runner_sha256, "Runner SHA-256")

        release_version = defaults.version
        if runner_version is not None:
            release_version = self.normalize_version(runner_version)
            if release_version != defaults.version and sha256 is None:
                raise ProvisionerError(
                    actionable_error("unverified_release", version=release_version)
                )

        base_url = download_base_url or defaults.base_url
        self.enforce_https_policy(base_url, "Download base URL")

        return RunnerRelease(
            version=release_version,
            sha256=sha256 or defaults.sha256,
            platform=defaults.platform,
            base_url=base_url,
        )
