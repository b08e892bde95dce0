import hashlib

import pytest
from rich.console import Console

from runnerprovisioner.errors import DownloadError, IntegrityError, ProvisionerError
from runnerprovisioner.services.download import DownloadService
from runnerprovisioner.services.validation import ValidationService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None


class FakeResponse:
    def __init__(self, payload: bytes):
        self.payload = payload
        self.headers = {"Content-Length": str(len(payload))}

    def raise_for_status(self):
        return None

    def iter_content(self, chunk_size=8192):
        yield self.payload

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeRequestsModule:
    class RequestException(Exception):
        pass

    def __init__(self, payload: bytes):
        self.payload = payload
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return FakeResponse(self.payload)


class FailingRequestsModule:
    class RequestException(Exception):
        pass

    def get(self, *_args, **_kwargs):
        raise self.RequestException("404 Client Error: Not Found")


def _service(requests_module) -> DownloadService:
    return DownloadService(
        validation_service=ValidationService(),
        logger=DummyLogger(),
        console=Console(record=True),
        requests_module=requests_module,
    )


def test_download_file_returns_digest_and_follows_redirects(tmp_path):
    payload = b"runner-package"
    requests_module = FakeRequestsModule(payload)
    dest = tmp_path / "pkg" / "runner.tar.gz"

    digest = _service(requests_module).download_file(
        "https://example.com/runner.tar.gz",
        str(dest),
        expected_sha256=hashlib.sha256(payload).hexdigest(),
    )

    assert digest == hashlib.sha256(payload).hexdigest()
    assert dest.read_bytes() == payload
    assert requests_module.calls[0][1]["allow_redirects"] is True
    assert requests_module.calls[0][1]["timeout"] is None


def test_download_file_rejects_checksum_mismatch_and_keeps_file(tmp_path):
    dest = tmp_path / "runner.tar.gz"

    with pytest.raises(IntegrityError, match="Checksum mismatch for runner.tar.gz"):
        _service(FakeRequestsModule(b"tampered")).download_file(
            "https://example.com/runner.tar.gz",
            str(dest),
            expected_sha256="0" * 64,
        )

    assert dest.exists()


def test_download_file_wraps_http_errors(tmp_path):
    with pytest.raises(DownloadError, match="404"):
        _service(FailingRequestsModule()).download_file(
            "https://example.com/runner.tar.gz",
            str(tmp_path / "runner.tar.gz"),
        )


def test_download_file_blocks_insecure_http_before_network(tmp_path):
    requests_module = FakeRequestsModule(b"unused")

    with pytest.raises(ProvisionerError, match="insecure HTTP"):
        _service(requests_module).download_file(
            "http://example.com/runner.tar.gz",
            str(tmp_path / "runner.tar.gz"),
        )

    assert requests_module.calls == []
