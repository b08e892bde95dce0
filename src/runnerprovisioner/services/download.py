"""Download service with progress reporting and checksum validation."""

import hashlib
import os
from typing import Optional

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from runnerprovisioner.errors import DownloadError, IntegrityError
from runnerprovisioner.errors_catalog import actionable_error


class DownloadService:
    """Fetches release assets and checks them against a pinned digest."""

    def __init__(self, validation_service, logger, console, requests_module, timeout: Optional[float] = None):
        self.validation_service = validation_service
        self.logger = logger
        self.console = console
        self.requests = requests_module
        self.timeout = timeout

    def download_file(
        self,
        url: str,
        dest_path: str,
        description: str = "Downloading...",
        expected_sha256: Optional[str] = None,
    ) -> str:
        """Stream ``url`` into ``dest_path`` and return its SHA-256 hex digest.

        Redirects are followed (GitHub serves release assets from a CDN).
        When ``expected_sha256`` is given, a mismatch raises
        :class:`IntegrityError` and the file is left on disk for inspection.
        """
        self.logger.info("Downloading %s to %s", url, dest_path)
        self.validation_service.enforce_https_policy(url, description)

        hasher = hashlib.sha256()

        try:
            with self.requests.get(url, stream=True, timeout=self.timeout, allow_redirects=True) as response:
                response.raise_for_status()
                total_size = int(response.headers.get("Content-Length", 0))

                os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)

                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    BarColumn(),
                    TaskProgressColumn(),
                    "•",
                    TimeElapsedColumn(),
                    console=self.console,
                ) as progress:
                    task = progress.add_task(f"[cyan]{description}", total=total_size or None)
                    with open(dest_path, "wb") as file_obj:
                        for chunk in response.iter_content(chunk_size=8192):
                            if not chunk:
                                continue
                            file_obj.write(chunk)
                            hasher.update(chunk)
                            progress.update(task, advance=len(chunk))
        except self.requests.RequestException as exc:
            raise DownloadError(f"Download failed for {url}: {exc}") from exc
        except OSError as exc:
            raise DownloadError(f"Could not write {dest_path}: {exc}") from exc

        digest = hasher.hexdigest()
        self.logger.debug("SHA-256 of %s: %s", dest_path, digest)

        if expected_sha256 is not None:
            self.verify_digest(dest_path, digest, expected_sha256)

        return digest

    def verify_digest(self, path: str, actual: str, expected: str):
        if actual.lower() != expected.lower():
            raise IntegrityError(
                actionable_error(
                    "checksum_mismatch",
                    filename=os.path.basename(path),
                    expected=expected,
                    actual=actual,
                )
            )
        self.logger.info("%s: OK", os.path.basename(path))
