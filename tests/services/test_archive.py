import io
import os
import tarfile

import pytest

from runnerprovisioner.errors import ExtractionError
from runnerprovisioner.services.archive import ArchiveService


def _add_file(tar_file, name, content, mode=0o644):
    info = tarfile.TarInfo(name)
    info.size = len(content)
    info.mode = mode
    tar_file.addfile(info, io.BytesIO(content))


def _add_symlink(tar_file, name, target):
    info = tarfile.TarInfo(name)
    info.type = tarfile.SYMTYPE
    info.linkname = target
    tar_file.addfile(info)


def test_archive_service_extracts_runner_layout_and_keeps_modes(tmp_path):
    service = ArchiveService()

    tar_path = tmp_path / "runner.tar.gz"
    with tarfile.open(tar_path, "w:gz") as tar_file:
        _add_file(tar_file, "./config.sh", b"#!/bin/bash\n", mode=0o755)
        _add_file(tar_file, "./bin/Runner.Listener.dll", b"binary")
        _add_symlink(tar_file, "./bin/current", "Runner.Listener.dll")

    destination = tmp_path / "actions-runner"
    destination.mkdir()

    service.safe_extract_tar(str(tar_path), str(destination))

    config_script = destination / "config.sh"
    assert config_script.read_bytes() == b"#!/bin/bash\n"
    assert os.access(config_script, os.X_OK)
    assert (destination / "bin" / "Runner.Listener.dll").read_bytes() == b"binary"
    assert os.readlink(destination / "bin" / "current") == "Runner.Listener.dll"


def test_archive_service_blocks_path_traversal(tmp_path):
    service = ArchiveService()

    tar_path = tmp_path / "malicious.tar.gz"
    with tarfile.open(tar_path, "w:gz") as tar_file:
        _add_file(tar_file, "../escape.txt", b"malicious")

    destination = tmp_path / "extract"
    destination.mkdir()

    with pytest.raises(ExtractionError, match="path traversal"):
        service.safe_extract_tar(str(tar_path), str(destination))

    assert not (tmp_path / "escape.txt").exists()


def test_archive_service_blocks_links_leaving_the_destination(tmp_path):
    service = ArchiveService()

    tar_path = tmp_path / "malicious.tar.gz"
    with tarfile.open(tar_path, "w:gz") as tar_file:
        _add_symlink(tar_file, "passwd", "../../etc/passwd")

    destination = tmp_path / "extract"
    destination.mkdir()

    with pytest.raises(ExtractionError, match="links outside"):
        service.safe_extract_tar(str(tar_path), str(destination))

    assert not os.path.lexists(destination / "passwd")


def test_archive_service_rejects_corrupt_archive(tmp_path):
    service = ArchiveService()

    tar_path = tmp_path / "broken.tar.gz"
    tar_path.write_bytes(b"this is not a tarball")

    with pytest.raises(ExtractionError, match="Invalid runner archive"):
        service.safe_extract_tar(str(tar_path), str(tmp_path))


def test_archive_service_reextracts_over_existing_deep_links(tmp_path):
    service = ArchiveService()

    tar_path = tmp_path / "runner.tar.gz"
    with tarfile.open(tar_path, "w:gz") as tar_file:
        _add_file(tar_file, "./shared.dll", b"shared")
        _add_symlink(tar_file, "./lib/a/b/shared.dll", "../../../shared.dll")

    destination = tmp_path / "actions-runner"
    destination.mkdir()

    service.safe_extract_tar(str(tar_path), str(destination))
    service.safe_extract_tar(str(tar_path), str(destination))

    link = destination / "lib" / "a" / "b" / "shared.dll"
    assert os.readlink(link) == "../../../shared.dll"
    assert link.read_bytes() == b"shared"
