"""Archive extraction helpers for runner-provisioner."""

import os
import shutil
import tarfile
from pathlib import Path

from runnerprovisioner.errors import ExtractionError


class ArchiveService:
    """Encapsulates safe tarball extraction logic."""

    def is_within_dir(self, base_dir: Path, candidate: Path) -> bool:
        try:
            return os.path.commonpath([str(base_dir), str(candidate)]) == str(base_dir)
        except ValueError:
            return False

    def _entry_path(self, base: Path, name: str) -> Path:
        # Only the parent is resolved: the entry itself may be a symlink left
        # by an earlier extraction and must not be followed.
        relative = os.path.normpath(name)
        if relative == ".":
            return base
        candidate = base / relative
        return candidate.parent.resolve() / candidate.name

    def _check_member(self, base: Path, member: tarfile.TarInfo):
        if os.path.isabs(member.name):
            raise ExtractionError(
                f"Unsafe archive entry detected: `{member.name}`. "
                "Archive extraction aborted to prevent path traversal."
            )
        target_path = self._entry_path(base, member.name)
        if not self.is_within_dir(base, target_path):
            raise ExtractionError(
                f"Unsafe archive entry detected: `{member.name}`. "
                "Archive extraction aborted to prevent path traversal."
            )

        if member.issym() or member.islnk():
            if os.path.isabs(member.linkname):
                raise ExtractionError(
                    f"Unsafe archive entry detected: `{member.name}` links to an absolute path."
                )
            if member.issym():
                link_target = (target_path.parent / member.linkname).resolve()
            else:
                link_target = self._entry_path(base, member.linkname)
            if not self.is_within_dir(base, link_target):
                raise ExtractionError(
                    f"Unsafe archive entry detected: `{member.name}` links outside the archive."
                )
        elif not (member.isdir() or member.isfile()):
            raise ExtractionError(
                f"Unsafe archive entry detected: `{member.name}` is a special file."
            )

    def safe_extract_tar(self, tar_path: str, destination_dir: str):
        base = Path(destination_dir).resolve()

        try:
            with tarfile.open(tar_path, "r:*") as tar_ref:
                members = tar_ref.getmembers()
                for member in members:
                    self._check_member(base, member)

                for member in members:
                    target_path = base / member.name

                    if member.isdir():
                        target_path.mkdir(parents=True, exist_ok=True)
                        os.chmod(target_path, (member.mode & 0o777) | 0o700)
                        continue

                    target_path.parent.mkdir(parents=True, exist_ok=True)
                    if os.path.lexists(target_path):
                        target_path.unlink()

                    if member.issym():
                        os.symlink(member.linkname, target_path)
                    elif member.islnk():
                        shutil.copy2(base / member.linkname, target_path)
                    else:
                        src = tar_ref.extractfile(member)
                        with src, open(target_path, "wb") as dst:
                            shutil.copyfileobj(src, dst)
                        os.chmod(target_path, member.mode & 0o777)
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise ExtractionError(f"Invalid runner archive: {tar_path}. {exc}") from exc
